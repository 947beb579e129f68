"""
Tests for sensitive-data masking.
"""

from http_tracing.utils.sanitizer import mask_headers, mask_sensitive_data

MASK = "***REDACTED***"


class TestMaskSensitiveData:

    def test_scalars_unchanged(self):
        assert mask_sensitive_data(None) is None
        assert mask_sensitive_data(200) == 200
        assert mask_sensitive_data(True) is True

    def test_sensitive_keys_masked(self):
        data = {"username": "alice", "password": "secret123", "X-Api-Key": "k"}
        assert mask_sensitive_data(data) == {
            "username": "alice", "password": MASK, "X-Api-Key": MASK,
        }

    def test_nested_structures(self):
        data = {"body": [{"token": "t"}, {"page": 1}]}
        assert mask_sensitive_data(data) == {"body": [{"token": MASK}, {"page": 1}]}

    def test_bearer_in_string(self):
        assert mask_sensitive_data("Authorization: Bearer abc.def") == f"Authorization: Bearer {MASK}"

    def test_query_string_in_url(self):
        assert (
            mask_sensitive_data("https://api.example.com?api_key=secret123&page=1")
            == f"https://api.example.com?api_key={MASK}&page=1"
        )

    def test_tuple_type_preserved(self):
        assert mask_sensitive_data(("a", "b")) == ("a", "b")

    def test_objects_returned_as_is(self):
        obj = object()
        assert mask_sensitive_data(obj) is obj


class TestMaskHeaders:

    def test_trace_headers_kept(self):
        headers = {"Cookie": "a=b", "traceparent": "00-abc-def-01"}
        assert mask_headers(headers) == {"Cookie": MASK, "traceparent": "00-abc-def-01"}

    def test_original_not_modified(self):
        headers = {"Authorization": "Bearer abc"}
        mask_headers(headers)
        assert headers == {"Authorization": "Bearer abc"}
