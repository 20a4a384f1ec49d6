"""Unit tests for the response envelope."""

from ytdl_gateway.models.responses import ApiResponse, ErrorMeta


def test_success_payload_has_no_meta():
    payload = ApiResponse(success=True, data={"status": "healthy"}).to_payload()
    assert payload == {
        "success": True,
        "data": {"status": "healthy"},
        "error": None,
        "meta": None,
    }


def test_unset_meta_keys_are_omitted():
    envelope = ApiResponse(
        success=False,
        error="Download failed",
        meta=ErrorMeta(retry_suggested=False),
    )
    assert envelope.to_payload()["meta"] == {"retry_suggested": False}


def test_rate_limit_meta_shape():
    meta = ErrorMeta(retry_suggested=True, retry_after_seconds=60)
    assert meta.retry_after_seconds == 60.0
    assert ApiResponse(success=False, meta=meta).to_payload()["meta"] == {
        "retry_suggested": True,
        "retry_after_seconds": 60.0,
    }


def test_extra_meta_keys_are_kept():
    meta = ErrorMeta(fields=[{"field": "body -> videoUrl"}])
    assert ApiResponse(success=False, meta=meta).to_payload()["meta"] == {
        "fields": [{"field": "body -> videoUrl"}]
    }
