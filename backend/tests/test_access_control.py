"""
SnapShare Backend — Access Control Gate Unit Tests
=====================================================

What we test:
    ✅ Bearer extraction: scheme, empty credential, header-name case
    ✅ Authenticate: no-token vs invalid-token, principal attached on success
    ✅ RequireRole: exact role match, no hierarchy between roles
    ✅ RequireOwnerOrRole: owner passes, role holder passes, anyone else rejected
    ✅ Stage order: authentication failures win over authorization failures
    ✅ Short-circuit: no stage after a rejecting one runs
"""

from unittest.mock import MagicMock

import pytest

from app.exceptions import (
    ForbiddenError,
    ForbiddenReason,
    UnauthorizedError,
    UnauthorizedReason,
)
from app.schemas.auth import Role
from app.services.access_control import (
    AccessGate,
    Authenticate,
    RequestContext,
    RequireOwnerOrRole,
    RequireRole,
    extract_bearer_token,
)


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TestExtractBearerToken:
    def test_absent_header(self):
        assert extract_bearer_token({}) is None

    def test_standard_header(self):
        assert extract_bearer_token({"Authorization": "Bearer abc.def.ghi"}) == "abc.def.ghi"

    def test_header_name_and_scheme_are_case_insensitive(self):
        assert extract_bearer_token({"authorization": "bearer tok"}) == "tok"

    @pytest.mark.parametrize(
        "value",
        ["", "Bearer", "Bearer ", "Basic dXNlcjpwYXNz", "tok"],
    )
    def test_malformed_values(self, value):
        assert extract_bearer_token({"Authorization": value}) is None

    def test_extra_whitespace_stays_in_credential(self):
        assert extract_bearer_token({"Authorization": "Bearer  tok"}) == " tok"
        assert extract_bearer_token({"Authorization": "Bearer a b"}) == "a b"


class TestAuthenticate:
    def test_missing_header_is_no_token(self, token_service):
        ctx = RequestContext(headers={})
        with pytest.raises(UnauthorizedError) as exc_info:
            Authenticate(token_service)(ctx)
        assert exc_info.value.reason == UnauthorizedReason.NO_TOKEN
        assert ctx.principal is None

    def test_wrong_scheme_is_no_token(self, token_service):
        with pytest.raises(UnauthorizedError) as exc_info:
            Authenticate(token_service)(RequestContext(headers={"Authorization": "Token abc"}))
        assert exc_info.value.reason == UnauthorizedReason.NO_TOKEN

    def test_unverifiable_token_is_invalid_token(self, token_service):
        with pytest.raises(UnauthorizedError) as exc_info:
            Authenticate(token_service)(RequestContext(headers=_bearer("garbage")))
        assert exc_info.value.reason == UnauthorizedReason.INVALID_TOKEN
        assert exc_info.value.message == "Unauthorized - Invalid token"

    def test_double_space_is_invalid_token(self, token_service, make_user_record):
        token = token_service.issue(make_user_record())
        with pytest.raises(UnauthorizedError) as exc_info:
            Authenticate(token_service)(RequestContext(headers={"Authorization": f"Bearer  {token}"}))
        assert exc_info.value.reason == UnauthorizedReason.INVALID_TOKEN

    def test_expired_token_is_invalid_token(self, token_service, make_user_record, fake_clock):
        token = token_service.issue(make_user_record())
        fake_clock.advance(token_service.ttl_seconds)
        with pytest.raises(UnauthorizedError) as exc_info:
            Authenticate(token_service)(RequestContext(headers=_bearer(token)))
        assert exc_info.value.reason == UnauthorizedReason.INVALID_TOKEN

    def test_valid_token_attaches_principal(self, token_service, make_user_record):
        user = make_user_record(user_id="7", email="bob@example.com", role=Role.CREATOR)
        ctx = RequestContext(headers=_bearer(token_service.issue(user)))
        Authenticate(token_service)(ctx)
        assert ctx.principal.id == "7"
        assert ctx.principal.email == "bob@example.com"
        assert ctx.principal.role == Role.CREATOR


class TestRequireRole:
    def _gate(self, token_service, role):
        return AccessGate(Authenticate(token_service), RequireRole(role))

    def test_matching_role_passes(self, token_service, make_user_record):
        token = token_service.issue(make_user_record(role=Role.CREATOR))
        principal = self._gate(token_service, Role.CREATOR).evaluate(
            RequestContext(headers=_bearer(token))
        )
        assert principal.role == Role.CREATOR

    def test_other_role_is_rejected(self, token_service, make_user_record):
        token = token_service.issue(make_user_record(role=Role.CONSUMER))
        with pytest.raises(ForbiddenError) as exc_info:
            self._gate(token_service, Role.CREATOR).evaluate(RequestContext(headers=_bearer(token)))
        assert exc_info.value.reason == ForbiddenReason.ROLE_MISMATCH
        assert exc_info.value.message == "Forbidden - Insufficient role"

    def test_creator_does_not_satisfy_consumer(self, token_service, make_user_record):
        token = token_service.issue(make_user_record(role=Role.CREATOR))
        with pytest.raises(ForbiddenError):
            self._gate(token_service, Role.CONSUMER).evaluate(RequestContext(headers=_bearer(token)))

    def test_without_authenticate_stage_is_unauthorized(self):
        with pytest.raises(UnauthorizedError) as exc_info:
            AccessGate(RequireRole(Role.CREATOR)).evaluate(RequestContext(headers={}))
        assert exc_info.value.reason == UnauthorizedReason.NO_TOKEN


class TestRequireOwnerOrRole:
    def _evaluate(self, token_service, user, owner_id):
        gate = AccessGate(
            Authenticate(token_service),
            RequireOwnerOrRole("user_id", Role.CREATOR),
        )
        path_params = {} if owner_id is None else {"user_id": owner_id}
        return gate.evaluate(
            RequestContext(headers=_bearer(token_service.issue(user)), path_params=path_params)
        )

    def test_owner_passes(self, token_service, make_user_record):
        user = make_user_record(user_id="42", role=Role.CONSUMER)
        assert self._evaluate(token_service, user, "42").id == "42"

    def test_role_holder_passes_for_other_owner(self, token_service, make_user_record):
        user = make_user_record(user_id="1", role=Role.CREATOR)
        assert self._evaluate(token_service, user, "42").id == "1"

    def test_non_owner_without_role_is_rejected(self, token_service, make_user_record):
        user = make_user_record(user_id="1", role=Role.CONSUMER)
        with pytest.raises(ForbiddenError) as exc_info:
            self._evaluate(token_service, user, "42")
        assert exc_info.value.reason == ForbiddenReason.OWNERSHIP_MISMATCH
        assert exc_info.value.message == "Forbidden - Insufficient permissions"

    def test_missing_path_param_is_not_ownership(self, token_service, make_user_record):
        user = make_user_record(user_id="1", role=Role.CONSUMER)
        with pytest.raises(ForbiddenError):
            self._evaluate(token_service, user, None)


class TestGateOrdering:
    def test_no_token_beats_role_check(self, token_service):
        gate = AccessGate(Authenticate(token_service), RequireRole(Role.CREATOR))
        with pytest.raises(UnauthorizedError):
            gate.evaluate(RequestContext(headers={}))

    def test_rejection_stops_the_chain(self, token_service):
        later_stage = MagicMock()
        gate = AccessGate(Authenticate(token_service), later_stage)
        with pytest.raises(UnauthorizedError):
            gate.evaluate(RequestContext(headers=_bearer("garbage")))
        later_stage.assert_not_called()

    def test_forbidden_stops_the_chain(self, token_service, make_user_record):
        later_stage = MagicMock()
        token = token_service.issue(make_user_record(role=Role.CONSUMER))
        gate = AccessGate(Authenticate(token_service), RequireRole(Role.CREATOR), later_stage)
        with pytest.raises(ForbiddenError):
            gate.evaluate(RequestContext(headers=_bearer(token)))
        later_stage.assert_not_called()

    def test_stages_run_in_declared_order(self, token_service, make_user_record):
        calls = []
        token = token_service.issue(make_user_record())
        gate = AccessGate(
            Authenticate(token_service),
            lambda ctx: calls.append(("first", ctx.principal.id)),
            lambda ctx: calls.append(("second", ctx.principal.id)),
        )
        gate.evaluate(RequestContext(headers=_bearer(token)))
        assert calls == [("first", "user-1"), ("second", "user-1")]
