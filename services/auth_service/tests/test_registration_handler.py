"""Registration and email verification against a real SQLite user table."""

from __future__ import annotations

import pytest
from library_service_libs.error_handling import CorrelationContext, LibraryError

from services.auth_service.api.schemas import RegisterRequest, SendOtpRequest, VerifyEmailRequest
from services.auth_service.domain_handlers.registration_handler import (
    RegistrationHandler,
    generate_otp,
)
from services.auth_service.implementations.password_hasher_impl import Argon2idPasswordHasher
from services.auth_service.implementations.user_repository_sqlalchemy_impl import (
    SqlAlchemyUserRepo,
)
from services.auth_service.tests.fakes import InMemoryOtpStore

ALICE = RegisterRequest(email="Alice@Example.com", username="alice", password="Password1!")


class TestRegister:
    async def test_creates_unverified_user_without_secrets(
        self,
        registration: RegistrationHandler,
        user_repo: SqlAlchemyUserRepo,
        password_hasher: Argon2idPasswordHasher,
        correlation: CorrelationContext,
    ) -> None:
        user = await registration.register(ALICE, correlation)

        assert user.email == "alice@example.com"
        assert user.verified is False
        assert user.role.value == "user"
        dumped = user.model_dump()
        assert "password_hash" not in dumped
        assert "refresh_token" not in dumped

        stored = await user_repo.get_by_email("alice@example.com")
        assert stored is not None
        assert stored.password_hash != "Password1!"
        assert password_hasher.verify(stored.password_hash, "Password1!")

    async def test_duplicate_email_is_rejected_case_insensitively(
        self, registration: RegistrationHandler, correlation: CorrelationContext
    ) -> None:
        await registration.register(ALICE, correlation)
        duplicate = ALICE.model_copy(update={"email": "alice@example.com", "username": "alice2"})

        with pytest.raises(LibraryError) as exc_info:
            await registration.register(duplicate, correlation)

        assert exc_info.value.error_code == "ALREADY_EXISTS"
        assert exc_info.value.status_code == 409


class TestSendOtp:
    async def test_stores_and_publishes_code(
        self,
        registration: RegistrationHandler,
        otp_store: InMemoryOtpStore,
        otp_publisher,
        correlation: CorrelationContext,
    ) -> None:
        await registration.register(ALICE, correlation)

        response = await registration.send_otp(SendOtpRequest(email=ALICE.email), correlation)

        otp = otp_store.codes["alice@example.com"]
        assert len(otp) == 6 and otp.isdigit()
        assert otp not in response.message
        otp_publisher.publish_otp.assert_awaited_once_with(
            "alice@example.com", otp, correlation.original
        )

    async def test_unknown_email_is_not_found(
        self, registration: RegistrationHandler, correlation: CorrelationContext
    ) -> None:
        with pytest.raises(LibraryError) as exc_info:
            await registration.send_otp(SendOtpRequest(email="ghost@example.com"), correlation)

        assert exc_info.value.error_code == "RESOURCE_NOT_FOUND"

    async def test_publish_failure_discards_code(
        self,
        registration: RegistrationHandler,
        otp_store: InMemoryOtpStore,
        otp_publisher,
        correlation: CorrelationContext,
    ) -> None:
        await registration.register(ALICE, correlation)
        otp_publisher.publish_otp.side_effect = ConnectionError("broker down")

        with pytest.raises(LibraryError) as exc_info:
            await registration.send_otp(SendOtpRequest(email=ALICE.email), correlation)

        assert exc_info.value.error_code == "KAFKA_PUBLISH_ERROR"
        assert otp_store.codes == {}


class TestVerifyEmail:
    async def test_correct_code_verifies_and_consumes_binding(
        self,
        registration: RegistrationHandler,
        user_repo: SqlAlchemyUserRepo,
        otp_store: InMemoryOtpStore,
        correlation: CorrelationContext,
    ) -> None:
        await registration.register(ALICE, correlation)
        await registration.send_otp(SendOtpRequest(email=ALICE.email), correlation)
        otp = otp_store.codes["alice@example.com"]

        await registration.verify_email(VerifyEmailRequest(email=ALICE.email, otp=otp), correlation)

        stored = await user_repo.get_by_email(ALICE.email)
        assert stored is not None and stored.verified is True
        assert otp_store.codes == {}

    async def test_wrong_code_is_invalid_otp(
        self,
        registration: RegistrationHandler,
        otp_store: InMemoryOtpStore,
        correlation: CorrelationContext,
    ) -> None:
        await registration.register(ALICE, correlation)
        await registration.send_otp(SendOtpRequest(email=ALICE.email), correlation)
        otp = otp_store.codes["alice@example.com"]
        wrong = f"{(int(otp) + 1) % 1_000_000:06d}"

        with pytest.raises(LibraryError) as exc_info:
            await registration.verify_email(
                VerifyEmailRequest(email=ALICE.email, otp=wrong), correlation
            )

        assert exc_info.value.error_code == "INVALID_OTP"
        assert exc_info.value.rpc_status.value == "INVALID_ARGUMENT"
        assert otp_store.codes["alice@example.com"] == otp

    async def test_expired_code_is_invalid_otp(
        self,
        registration: RegistrationHandler,
        otp_store: InMemoryOtpStore,
        correlation: CorrelationContext,
    ) -> None:
        await registration.register(ALICE, correlation)
        await registration.send_otp(SendOtpRequest(email=ALICE.email), correlation)
        otp = otp_store.codes["alice@example.com"]
        otp_store.expire(ALICE.email)

        with pytest.raises(LibraryError) as exc_info:
            await registration.verify_email(
                VerifyEmailRequest(email=ALICE.email, otp=otp), correlation
            )

        assert exc_info.value.error_code == "INVALID_OTP"

    async def test_already_verified_user_cannot_request_another_code(
        self,
        registration: RegistrationHandler,
        otp_store: InMemoryOtpStore,
        correlation: CorrelationContext,
    ) -> None:
        await registration.register(ALICE, correlation)
        await registration.send_otp(SendOtpRequest(email=ALICE.email), correlation)
        otp = otp_store.codes["alice@example.com"]
        await registration.verify_email(VerifyEmailRequest(email=ALICE.email, otp=otp), correlation)

        with pytest.raises(LibraryError) as exc_info:
            await registration.send_otp(SendOtpRequest(email=ALICE.email), correlation)

        assert exc_info.value.error_code == "EMAIL_ALREADY_VERIFIED"
        assert exc_info.value.status_code == 409


def test_generated_codes_are_six_digits() -> None:
    codes = {generate_otp() for _ in range(200)}

    assert all(len(code) == 6 and code.isdigit() for code in codes)
    assert len(codes) > 1
