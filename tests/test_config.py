import pytest

from memdecay.config import RetrieverConfig
from memdecay.exceptions import InvalidConfiguration


def test_defaults_are_valid():
    config = RetrieverConfig()
    config.validate()
    assert config.decay_rate == 0.01
    assert config.k == 4
    assert config.other_score_keys == []
    assert config.default_salience == 0.0


@pytest.mark.parametrize("decay_rate", [0.0, 0.5, 1.0])
def test_decay_rate_bounds_are_legal(decay_rate):
    RetrieverConfig(decay_rate=decay_rate).validate()


@pytest.mark.parametrize("decay_rate", [-0.01, 1.01, float("nan"), "0.5", None])
def test_decay_rate_out_of_range(decay_rate):
    with pytest.raises(InvalidConfiguration, match="decay_rate"):
        RetrieverConfig(decay_rate=decay_rate).validate()


@pytest.mark.parametrize("k", [0, -3, 2.5, True])
def test_k_must_be_positive_integer(k):
    with pytest.raises(InvalidConfiguration, match="k must be"):
        RetrieverConfig(k=k).validate()


def test_default_salience_must_be_numeric():
    with pytest.raises(InvalidConfiguration, match="default_salience"):
        RetrieverConfig(default_salience="low").validate()


@pytest.mark.parametrize("default_salience", [float("nan"), float("inf"), float("-inf")])
def test_default_salience_must_be_finite(default_salience):
    with pytest.raises(InvalidConfiguration, match="default_salience"):
        RetrieverConfig(default_salience=default_salience).validate()


def test_cache_settings_must_be_positive():
    with pytest.raises(InvalidConfiguration, match="embedding_cache_size"):
        RetrieverConfig(embedding_cache_size=0).validate()
    with pytest.raises(InvalidConfiguration, match="embedding_cache_ttl_seconds"):
        RetrieverConfig(embedding_cache_ttl_seconds=-1).validate()


def test_invalid_configuration_is_a_value_error():
    with pytest.raises(ValueError):
        RetrieverConfig(decay_rate=2.0).validate()


def test_other_score_keys_are_not_shared_between_instances():
    a = RetrieverConfig()
    b = RetrieverConfig()
    a.other_score_keys.append("importance")
    assert b.other_score_keys == []
