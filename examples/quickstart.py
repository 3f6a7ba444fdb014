"""
memdecay Quickstart
===================

Shows how retrieval refreshes memories: a fact that keeps being retrieved
stays ahead of an equally relevant one that is left alone.

Run with:
    uv run python examples/quickstart.py

Requires:
    - OPENAI_API_KEY environment variable
"""

import asyncio
from datetime import datetime, timedelta, timezone

from memdecay import TimeWeightedRetriever
from memdecay.embeddings import OpenAIEmbedAdapter


async def main():
    retriever = TimeWeightedRetriever(
        embedding_client=OpenAIEmbedAdapter(),
        decay_rate=0.05,
        other_score_keys=["importance"],
    )

    start = datetime.now(timezone.utc)
    await retriever.insert("The user drinks oat milk lattes.", {"importance": 0.2}, now=start)
    await retriever.insert("The user likes flat whites on weekends.", now=start)
    await retriever.insert("The user is training for a marathon in May.", {"importance": 0.5}, now=start)

    # Ask about coffee every few hours for a day
    for hour in range(0, 24, 6):
        result = await retriever.query("What coffee does the user order?", now=start + timedelta(hours=hour), k=1)
        top = result.results[0]
        print(f"+{hour:2d}h  {top.score:.3f}  {top.document.content}")

    # A day later, ask something broader
    result = await retriever.query("What do you know about the user?", now=start + timedelta(hours=30), k=3)
    print()
    print(result.to_prompt())


if __name__ == "__main__":
    asyncio.run(main())
