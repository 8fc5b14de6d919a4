import pytest
from pydantic import ValidationError

from hyperlane_relayer.errors import InvalidInput
from hyperlane_relayer.types.config import ConfigSet, SetConfigRequest, validate_relay_chains


@pytest.mark.parametrize(
    "relay_chains",
    [
        "ethereum,polygon",
        "ethereum,avalanche,polygon",
        " ethereum , polygon ",
    ],
)
def test_valid_relay_chains_are_returned_verbatim(relay_chains: str):
    assert validate_relay_chains(relay_chains) == relay_chains


@pytest.mark.parametrize(
    "relay_chains",
    [
        "",
        "ethereum",
        "ethereum polygon",
    ],
)
def test_relay_chains_without_separator_are_rejected(relay_chains: str):
    with pytest.raises(InvalidInput, match="at least two chains"):
        validate_relay_chains(relay_chains)


@pytest.mark.parametrize("relay_chains", [",", "ethereum,", ",polygon", " , "])
def test_relay_chains_with_empty_identifiers_are_rejected(relay_chains: str):
    with pytest.raises(InvalidInput, match="two non-empty chain names"):
        validate_relay_chains(relay_chains)


def test_invalid_input_is_a_value_error():
    with pytest.raises(ValueError):
        validate_relay_chains("ethereum")


def test_config_set_exposes_chains_in_order():
    config = ConfigSet(documents=('{"a":1}',), relay_chains="ethereum, avalanche,polygon")

    assert config.chains == ["ethereum", "avalanche", "polygon"]
    assert config.relay_chains == "ethereum, avalanche,polygon"


def test_config_set_rejects_single_chain():
    with pytest.raises(ValidationError, match="at least two chains"):
        ConfigSet(relay_chains="ethereum")


def test_config_set_is_immutable():
    config = ConfigSet(relay_chains="ethereum,polygon")

    with pytest.raises(ValidationError):
        config.relay_chains = "a,b"  # type: ignore[misc]


def test_set_config_request_defaults_configs_to_none():
    request = SetConfigRequest.model_validate({"relay_chains": "ethereum,polygon"})

    assert request.configs is None
    assert request.relay_chains == "ethereum,polygon"


def test_set_config_request_accepts_invalid_chains_for_later_validation():
    request = SetConfigRequest.model_validate({"configs": [], "relay_chains": "ethereum"})

    assert request.configs == []


def test_set_config_request_rejects_unknown_fields():
    with pytest.raises(ValidationError):
        SetConfigRequest.model_validate({"relay_chains": "a,b", "signer": "0x00"})
