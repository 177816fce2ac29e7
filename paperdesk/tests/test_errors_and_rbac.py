"""
Error envelope and identity context tests.
"""
from datetime import timedelta

import pytest
from jose import jwt

from paperdesk.errors import (
    ConflictError, ErrorCode, ForbiddenError, NotFoundError, StorageError,
    UnauthorizedError, ValidationError, require_fields
)
from paperdesk.rbac import (
    Identity, Role, create_access_token, decode_token, ensure_admin,
    ensure_faculty, ensure_same_faculty, identity_from_claims
)


class TestErrorEnvelope:

    def test_validation_error_shape(self):
        error = ValidationError("bad input", details={"field": "role"})
        assert error.status_code == 400
        assert error.to_dict() == {
            "success": False,
            "error": "Validation Error",
            "message": "bad input",
            "code": ErrorCode.VALIDATION_ERROR,
            "details": {"field": "role"},
        }

    def test_conflict_maps_to_400(self):
        assert ConflictError("dup", ErrorCode.DUPLICATE_ASSIGNMENT).status_code == 400

    def test_not_found_message_names_resource(self):
        error = NotFoundError("Question paper", 7, ErrorCode.QUESTION_PAPER_NOT_FOUND)
        assert error.status_code == 404
        assert error.message == "Question paper '7' not found"
        assert "details" not in error.to_dict()

    def test_status_codes(self):
        assert UnauthorizedError().status_code == 401
        assert ForbiddenError("no").status_code == 403
        assert StorageError(log_id="abc").status_code == 503
        assert StorageError(log_id="abc").details == {"log_id": "abc"}

    def test_require_fields_lists_every_blank(self):
        with pytest.raises(ValidationError) as exc:
            require_fields({"a": "x", "b": "  ", "c": None, "d": [], "e": 0}, "thing")
        assert exc.value.code == ErrorCode.MISSING_FIELD
        assert exc.value.details == {"fields": ["b", "c", "d"]}


class TestTokens:

    def test_faculty_token_round_trip(self):
        token = create_access_token(Role.FACULTY, "F1", "asha")
        identity = identity_from_claims(decode_token(token))
        assert identity == Identity(role=Role.FACULTY, faculty_id="F1", username="asha")

    def test_expired_token_is_rejected(self):
        token = create_access_token(Role.ADMIN, expires_delta=timedelta(minutes=-5))
        assert decode_token(token) is None

    def test_token_signed_with_other_key_is_rejected(self):
        token = jwt.encode(
            {"sub": "intruder", "role": "admin", "type": "access"},
            "not-the-shared-secret",
            algorithm="HS256"
        )
        assert decode_token(token) is None

    def test_faculty_claims_without_id_are_rejected(self):
        with pytest.raises(UnauthorizedError):
            identity_from_claims({"type": "access", "role": "faculty", "sub": "x"})

    def test_unknown_role_is_rejected(self):
        with pytest.raises(UnauthorizedError):
            identity_from_claims({"type": "access", "role": "student", "faculty_id": "S1"})


class TestAuthorizationChecks:
    admin = Identity(role=Role.ADMIN, username="exam-cell")
    f1 = Identity(role=Role.FACULTY, faculty_id="F1")

    def test_admin_only(self):
        ensure_admin(self.admin, "x")
        with pytest.raises(ForbiddenError) as exc:
            ensure_admin(self.f1, "x")
        assert exc.value.code == ErrorCode.PERMISSION_DENIED

    def test_faculty_only(self):
        ensure_faculty(self.f1, "x")
        with pytest.raises(ForbiddenError):
            ensure_faculty(self.admin, "x")

    def test_same_faculty(self):
        ensure_same_faculty(self.f1, "F1")
        ensure_same_faculty(self.admin, "F9")
        with pytest.raises(ForbiddenError) as exc:
            ensure_same_faculty(self.f1, "F2")
        assert exc.value.code == ErrorCode.OWNERSHIP_VIOLATION
