"""Tests for the custom error hierarchy."""

import pytest

from chatfeed.errors import (
    AnchorNotFoundError,
    ApplicationError,
    ChatFeedError,
    DomainError,
    DuplicateCursor,
    InfrastructureError,
    NotInitializedError,
    PaginationBusyError,
    ProviderQueryFailure,
    SettingsError,
    SettingsLoadError,
    SettingsValidationError,
    StaleHandle,
)


@pytest.mark.parametrize("layer", [DomainError, InfrastructureError, ApplicationError, SettingsError])
def test_layers_are_chatfeed_errors(layer):
    assert issubclass(layer, ChatFeedError)
    assert isinstance(layer("x"), ChatFeedError)


@pytest.mark.parametrize(
    "error, layer",
    [
        (DuplicateCursor, DomainError),
        (AnchorNotFoundError, DomainError),
        (ProviderQueryFailure, InfrastructureError),
        (StaleHandle, InfrastructureError),
        (PaginationBusyError, ApplicationError),
        (NotInitializedError, ApplicationError),
        (SettingsLoadError, SettingsError),
        (SettingsValidationError, SettingsError),
    ],
)
def test_error_layers(error, layer):
    assert issubclass(error, layer)


def test_duplicate_cursor_keeps_cursor():
    err = DuplicateCursor("<= 1700")
    assert err.cursor == "<= 1700"
    assert "1700" in str(err)


def test_anchor_not_found_keeps_item_id():
    err = AnchorNotFoundError("m42")
    assert err.item_id == "m42"
    assert "m42" in str(err)


def test_catch_by_layer():
    with pytest.raises(InfrastructureError):
        raise StaleHandle("invalidated")
