from datetime import timedelta

import pytest
from sqlalchemy import update

from mdfury.core.config import config
from mdfury.core.exceptions import (InvalidAdminKeyError, InviteCodeAlreadyUsedError,
                                    InviteCodeExpiredError, InviteCodeNotFoundError, ValidationFailedError)
from mdfury.core.services.invite_service import InviteCodeManager, InviteCodeStatus
from mdfury.core.utils import utcnow
from mdfury.database.models.invitation import InviteCode

ADMIN_KEY = config.INVITE_KEY


@pytest.fixture
def manager(db):
    return InviteCodeManager(db, ADMIN_KEY)


async def expire(db, invite):
    invite.expires_at = utcnow() - timedelta(hours=1)
    await db.commit()


class TestAdminKey:
    def test_verify_admin_key(self):
        manager = InviteCodeManager(None, ADMIN_KEY)
        assert manager.verify_admin_key(ADMIN_KEY)
        assert not manager.verify_admin_key("wrong")
        assert not manager.verify_admin_key(None)

    def test_unconfigured_key_rejects_everything(self):
        manager = InviteCodeManager(None, None)
        assert not manager.verify_admin_key("")
        assert not manager.verify_admin_key(ADMIN_KEY)

    async def test_generate_requires_key(self, manager):
        with pytest.raises(InvalidAdminKeyError):
            await manager.generate("wrong")

    async def test_stats_requires_key(self, manager):
        with pytest.raises(InvalidAdminKeyError):
            await manager.stats("wrong")


class TestGenerate:
    async def test_code_shape(self, manager):
        invite = await manager.generate(ADMIN_KEY)

        assert len(invite.code) == 12
        assert invite.code == invite.code.upper()
        assert invite.is_used is False
        assert invite.expires_at is None

    @pytest.mark.parametrize("expiry_hours", [None, 0, -5])
    async def test_non_positive_expiry_never_expires(self, manager, expiry_hours):
        invite = await manager.generate(ADMIN_KEY, expiry_hours)
        assert invite.expires_at is None
        assert await manager.validate(invite.code) is InviteCodeStatus.VALID

    async def test_positive_expiry(self, manager):
        invite = await manager.generate(ADMIN_KEY, 24)
        assert invite.expires_at > utcnow() + timedelta(hours=23)

    @pytest.mark.parametrize("expiry_hours", [1e12, 1e9, float("inf")])
    async def test_unrepresentable_expiry_is_rejected(self, manager, expiry_hours):
        with pytest.raises(ValidationFailedError):
            await manager.generate(ADMIN_KEY, expiry_hours)
        assert (await manager.stats(ADMIN_KEY))["stats"]["total"] == 0


class TestValidate:
    async def test_unknown_code(self, manager):
        assert await manager.validate("NOSUCHCODE00") is InviteCodeStatus.NOT_FOUND

    async def test_input_is_trimmed_and_uppercased(self, manager):
        invite = await manager.generate(ADMIN_KEY)
        assert await manager.validate(f"  {invite.code.lower()} ") is InviteCodeStatus.VALID

    async def test_expired(self, db, manager):
        invite = await manager.generate(ADMIN_KEY, 1)
        await expire(db, invite)
        assert await manager.validate(invite.code) is InviteCodeStatus.EXPIRED

    async def test_used_wins_over_expired(self, db, manager):
        invite = await manager.generate(ADMIN_KEY, 1)
        await manager.redeem(invite.code)
        await expire(db, invite)
        assert await manager.validate(invite.code) is InviteCodeStatus.ALREADY_USED

    async def test_require_valid_raises_matching_error(self, db, manager):
        with pytest.raises(InviteCodeNotFoundError):
            await manager.require_valid("NOSUCHCODE00")

        expired = await manager.generate(ADMIN_KEY, 1)
        await expire(db, expired)
        with pytest.raises(InviteCodeExpiredError):
            await manager.require_valid(expired.code)


class TestRedeem:
    async def test_redeem_twice(self, manager, make_user):
        user, _ = await make_user("newcomer")
        invite = await manager.generate(ADMIN_KEY)

        redeemed = await manager.redeem(invite.code, user.id)
        assert redeemed.is_used is True
        assert redeemed.used_by_user_id == user.id
        assert redeemed.used_at is not None

        with pytest.raises(InviteCodeAlreadyUsedError):
            await manager.redeem(invite.code, user.id)
        assert await manager.validate(invite.code) is InviteCodeStatus.ALREADY_USED

    async def test_unknown_redeemer_is_recorded_as_nobody(self, manager):
        invite = await manager.generate(ADMIN_KEY)
        redeemed = await manager.redeem(invite.code, 9999)
        assert redeemed.is_used is True
        assert redeemed.used_by_user_id is None

    async def test_losing_the_race_to_another_redeemer(self, db, manager, make_user, monkeypatch):
        user, _ = await make_user("newcomer")
        invite = await manager.generate(ADMIN_KEY)
        mark_as_used = manager.repo.mark_as_used

        # The other redeemer commits after our lookup but before our update
        async def redeemed_elsewhere(code, user_id, used_at):
            await db.execute(update(InviteCode).where(InviteCode.code == code).values(is_used=True))
            await db.commit()
            return await mark_as_used(code, user_id, used_at)

        monkeypatch.setattr(manager.repo, "mark_as_used", redeemed_elsewhere)

        with pytest.raises(InviteCodeAlreadyUsedError):
            await manager.redeem(invite.code, user.id)
        refreshed = await manager.repo.refresh(invite)
        assert refreshed.used_by_user_id is None

    async def test_unknown_code(self, manager):
        with pytest.raises(InviteCodeNotFoundError):
            await manager.redeem("NOSUCHCODE00")

    async def test_redeem_does_not_recheck_expiry(self, db, manager):
        invite = await manager.generate(ADMIN_KEY, 1)
        await expire(db, invite)
        redeemed = await manager.redeem(invite.code)
        assert redeemed.is_used is True


class TestStats:
    async def test_counts_and_recent_codes(self, db, manager, make_user):
        user, _ = await make_user("newcomer")
        used = await manager.generate(ADMIN_KEY)
        await manager.redeem(used.code, user.id)
        expired = await manager.generate(ADMIN_KEY, 1)
        await expire(db, expired)
        await manager.generate(ADMIN_KEY)

        result = await manager.stats(ADMIN_KEY)

        assert result["stats"] == {"total": 3, "active": 1, "used": 1, "expired": 1}
        assert len(result["recent_codes"]) == 3
        by_code = {entry["code"]: entry for entry in result["recent_codes"]}
        assert by_code[used.code]["used_by"] == "newcomer"
        assert by_code[used.code]["used_by_email"] == "newcomer@example.com"
        assert by_code[expired.code]["is_expired"] is True

    async def test_recent_codes_are_limited(self, manager):
        for _ in range(5):
            await manager.generate(ADMIN_KEY)
        result = await manager.stats(ADMIN_KEY, recent_limit=2)
        assert result["stats"]["total"] == 5
        assert len(result["recent_codes"]) == 2
