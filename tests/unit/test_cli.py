"""
Unit tests for the administration CLI
"""
import pytest

from teacha.cli import create_parser, main
from teacha.database.connection import drop_db, get_db_context
from teacha.database.models import User, UserRole


@pytest.fixture
def cli_database():
    """The CLI works on the application engine (in-memory SQLite under test)"""
    assert main(["init-db"]) == 0
    yield
    drop_db()


class TestParser:

    def test_create_admin_requires_email_and_name(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["create-admin", "--email", "a@b.com"])

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "init-db" in capsys.readouterr().out


class TestCreateAdmin:

    def test_creates_platform_admin(self, cli_database):
        code = main([
            "create-admin", "--email", "Root@Teacha.com", "--name", "Root", "--password", "long-enough-pw",
        ])

        assert code == 0
        with get_db_context() as db:
            admin = db.query(User).filter(User.email == "root@teacha.com").one()
            assert admin.role == UserRole.ADMIN
            assert admin.tenant_id is None

    def test_duplicate_email_fails(self, cli_database, capsys):
        args = ["create-admin", "--email", "root@teacha.com", "--name", "Root", "--password", "long-enough-pw"]

        assert main(args) == 0
        assert main(args) == 1
        assert "already exists" in capsys.readouterr().out

    def test_short_password_rejected(self, cli_database):
        assert main(["create-admin", "--email", "x@teacha.com", "--name", "X", "--password", "short"]) == 1
