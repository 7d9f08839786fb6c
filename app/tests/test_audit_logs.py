import pytest
from sqlalchemy.future import select

from app.core.audit_log import log_audit
from app.core.enums import AuditAction
from app.models.audit import Audit
from app.schemas.auth import RegisterIn
from app.utils.hashing import payload_hash


@pytest.mark.audit
class TestAuditLogging:

    async def test_records_hash_of_payload(self, db_session, admin_user):
        await log_audit(db_session, admin_user.id, AuditAction.UPDATE_USER, {"id": 5, "telefono": "1"})
        await db_session.commit()

        res = await db_session.execute(select(Audit))
        audit = res.scalars().one()
        assert audit.user_id == admin_user.id
        assert audit.action == "update_user"
        assert audit.payload_hash == payload_hash({"id": 5, "telefono": "1"})

    async def test_passwords_never_reach_the_hash(self, db_session, admin_user):
        payload = RegisterIn(
            primer_nombre="María",
            primer_apellido="López",
            email="maria@example.com",
            password="secret1",
        )
        await log_audit(db_session, admin_user.id, AuditAction.REGISTER, payload)
        await db_session.commit()

        res = await db_session.execute(select(Audit))
        audit = res.scalars().one()
        expected = payload.model_dump(exclude_unset=True)
        expected.pop("password")
        assert audit.payload_hash == payload_hash(expected)

    async def test_hash_is_order_independent(self):
        assert payload_hash({"a": 1, "b": 2}) == payload_hash({"b": 2, "a": 1})
        assert len(payload_hash({})) == 64

    async def test_failures_are_not_raised(self, db_session):
        # user_id cannot be coerced to int.
        await log_audit(db_session, "not-a-number", AuditAction.LOGIN, {})
        res = await db_session.execute(select(Audit))
        assert res.scalars().all() == []
