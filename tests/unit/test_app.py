"""Unit tests for the startup helpers in app.py."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import DuplicateKeyError

from app import ensure_indexes
from errors import PersistenceError


def _repo(error=None):
    repo = MagicMock()
    repo.ensure_indexes = AsyncMock(side_effect=error)
    return repo


class TestEnsureIndexes:
    async def test_runs_every_repository(self):
        a, b = _repo(), _repo()
        await ensure_indexes(a, b, strict=True)
        a.ensure_indexes.assert_awaited_once()
        b.ensure_indexes.assert_awaited_once()

    async def test_lenient_logs_and_continues(self, mocker):
        log = mocker.patch("app.log")
        failing, ok = _repo(PersistenceError("down")), _repo()

        await ensure_indexes(failing, ok, strict=False)

        ok.ensure_indexes.assert_awaited_once()
        log.error.assert_called_once()
        event, = log.error.call_args.args
        fields = log.error.call_args.kwargs
        assert event == "ensure_indexes_failed"
        assert fields["error"] == "down"
        assert fields["error_type"] == "PersistenceError"
        assert isinstance(fields["exc_info"], PersistenceError)

    @pytest.mark.parametrize(
        "error",
        [PersistenceError("down"), DuplicateKeyError("E11000 duplicate key error")],
        ids=["store_down", "existing_duplicates"],
    )
    async def test_strict_reraises(self, error):
        later = _repo()
        with pytest.raises(type(error)):
            await ensure_indexes(_repo(error), later, strict=True)
        later.ensure_indexes.assert_not_called()
