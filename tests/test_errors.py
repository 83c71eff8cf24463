"""Tests for the storage error taxonomy."""

from shortlink.errors import (
    AlreadyExistsError,
    NotFoundError,
    OperationalFailure,
    StorageError,
    UnauthorizedError,
    URLExistsError,
    URLNotFoundError,
    UserExistsError,
    UserNotFoundError,
)


class TestErrorTaxonomy:
    """Test error kinds and messages."""
    
    def test_specialisations_share_a_kind(self):
        assert issubclass(URLNotFoundError, NotFoundError)
        assert issubclass(UserNotFoundError, NotFoundError)
        assert issubclass(URLExistsError, AlreadyExistsError)
        assert issubclass(UserExistsError, AlreadyExistsError)
    
    def test_operational_failure_is_not_a_domain_kind(self):
        for kind in (NotFoundError, AlreadyExistsError, UnauthorizedError):
            assert not issubclass(OperationalFailure, kind)
        assert issubclass(OperationalFailure, StorageError)
    
    def test_default_message_and_context(self):
        error = URLNotFoundError(backend="postgres", op="storage.postgres.get_url")
        
        assert error.message == "Url not found"
        assert error.backend == "postgres"
        assert str(error) == "storage.postgres.get_url: Url not found"
    
    def test_custom_message(self):
        assert str(OperationalFailure("connection refused")) == "connection refused"
    
    def test_combine_names_every_cause(self):
        first = OperationalFailure("connection refused")
        second = UserNotFoundError()
        
        error = OperationalFailure.combine({"postgres": first, "mongodb": second}, op="lookup")
        
        assert str(error) == "lookup: postgres error: connection refused, mongodb error: User not found"
        assert error.causes == {"postgres": first, "mongodb": second}
