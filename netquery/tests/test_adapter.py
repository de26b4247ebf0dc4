"""Tests for EnVectorSDKAdapter result handling (SDK calls patched)."""

import pytest
from unittest.mock import MagicMock, patch

pytest.importorskip("pyenvector")


@pytest.fixture
def adapter():
    from netquery.adapter.envector_sdk import EnVectorSDKAdapter

    with patch("netquery.adapter.envector_sdk.ev") as ev:
        instance = EnVectorSDKAdapter(address="localhost:50050", key_id="k", key_path="/tmp/keys")
        yield instance, ev


class TestEnVectorSDKAdapter:
    def test_get_index_list_ok(self, adapter):
        instance, ev = adapter
        ev.get_index_list.return_value = ["acme_corp_linkedin_connections"]

        assert instance.call_get_index_list() == {
            "ok": True, "results": ["acme_corp_linkedin_connections"],
        }

    def test_search_passes_topk_and_metadata_field(self, adapter):
        instance, ev = adapter
        index = MagicMock()
        index.search.return_value = [[{"id": 1, "distance": 0.2, "metadata": "{}"}]]
        ev.Index.return_value = index

        result = instance.call_search("acme_corp_linkedin_connections", [0.1, 0.2], topk=5)

        ev.Index.assert_called_once_with("acme_corp_linkedin_connections")
        index.search.assert_called_once_with([0.1, 0.2], top_k=5, output_fields=["metadata"])
        assert result["ok"] is True
        assert result["results"][0][0]["distance"] == 0.2

    def test_sdk_error_reported(self, adapter):
        instance, ev = adapter
        ev.Index.side_effect = RuntimeError("UNAVAILABLE")

        result = instance.call_search("idx", [0.1], topk=5)

        assert result["ok"] is False
        assert "UNAVAILABLE" in result["error"]
