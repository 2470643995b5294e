"""
Error Taxonomy Unit Tests
Tests for core/schemas/errors.py
"""
import pytest

from core.schemas.errors import (
    ConfigurationException,
    ErrorCodes,
    LeafNotFoundException,
    MerkleVerificationException,
    NodeEncodingException,
    TreeError,
    TreeException,
    TreeFullException,
    TreeIndexException,
    TreeStateException,
)


class TestExceptionCodes:
    """Each exception carries its stable code."""

    @pytest.mark.parametrize("exc, code", [
        (ConfigurationException("x"), ErrorCodes.CONFIGURATION_ERROR),
        (LeafNotFoundException("x"), ErrorCodes.LEAF_NOT_FOUND),
        (TreeIndexException("x"), ErrorCodes.INDEX_MODE_VIOLATION),
        (TreeFullException("x"), ErrorCodes.TREE_FULL),
        (TreeStateException("x"), ErrorCodes.TREE_STATE_ERROR),
        (NodeEncodingException("x"), ErrorCodes.NODE_ENCODING_ERROR),
        (MerkleVerificationException("x"), ErrorCodes.MERKLE_PROOF_INVALID),
    ])
    def test_codes(self, exc, code):
        assert exc.code == code
        assert isinstance(exc, TreeException)
        assert exc.retryable is False

    def test_builtin_bases(self):
        """Tree errors are also the matching builtin exceptions."""
        assert isinstance(ConfigurationException("x"), ValueError)
        assert isinstance(NodeEncodingException("x"), ValueError)
        assert isinstance(TreeIndexException("x"), IndexError)
        assert isinstance(LeafNotFoundException("x"), LookupError)


class TestDetails:
    """Structured details are filled from keyword arguments."""

    def test_index_exception_details(self):
        exc = TreeIndexException("bad", leaf_index=4, leaf_count=2)

        assert exc.details == {"leaf_index": 4, "leaf_count": 2}
        assert str(exc) == "bad"

    def test_not_found_details(self):
        exc = LeafNotFoundException("missing", leaf_index=0)

        assert exc.details == {"leaf_index": 0}

    def test_encoding_details_truncate_value(self):
        exc = NodeEncodingException("bad", value="x" * 500)

        assert len(exc.details["value"]) <= 80


class TestErrorModel:
    """Conversion between exceptions and TreeError models."""

    def test_to_error_model(self):
        exc = TreeFullException("full", capacity=8)
        model = exc.to_error_model()

        assert isinstance(model, TreeError)
        assert model.code == ErrorCodes.TREE_FULL
        assert model.details == {"capacity": 8}
        assert model.model_dump()["message"] == "full"

    def test_model_forbids_extra_fields(self):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            TreeError(code="X", message="y", unexpected=True)

    def test_repr(self):
        assert repr(TreeStateException("busy")) == (
            "TreeStateException(code='TREE_STATE_ERROR', message='busy')"
        )
