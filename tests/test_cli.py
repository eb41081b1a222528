import pytest
from click.testing import CliRunner

import cli as admin_cli
from travel_planner import db
from travel_planner.models import Profile, User
from travel_planner.repositories.profiles import set_online_status


@pytest.fixture
def runner(app, monkeypatch):
    monkeypatch.setattr(admin_cli, "app", app)
    return CliRunner()


def test_add_user_and_set_password(runner):
    result = runner.invoke(
        admin_cli.cli,
        ["add-user", "--username", "jdoe", "--email", "JDoe@Example.com", "--password", "secret123"],
    )
    assert result.exit_code == 0, result.output
    assert "created with public id" in result.output

    user = User.query.filter_by(username="jdoe").one()
    assert user.email == "jdoe@example.com"
    assert len(user.profile.public_id) == 8

    duplicate = runner.invoke(
        admin_cli.cli,
        ["add-user", "--username", "jdoe", "--email", "other@example.com", "--password", "secret123"],
    )
    assert duplicate.exit_code != 0

    result = runner.invoke(admin_cli.cli, ["set-password", "--username", "JDOE", "--password", "changed1"])
    assert result.exit_code == 0
    db.session.expire_all()
    assert db.session.get(User, user.id).check_password("changed1")

    missing = runner.invoke(admin_cli.cli, ["set-password", "--username", "ghost", "--password", "x"])
    assert missing.exit_code != 0
    assert "was not found" in missing.output


def test_schema_inspection(runner):
    assert runner.invoke(admin_cli.cli, ["init-db"]).exit_code == 0

    tables = runner.invoke(admin_cli.cli, ["list-tables"]).output.split()
    assert {"users", "profiles", "friend_invites", "user_friends", "group_invites"} <= set(tables)

    indexes = runner.invoke(admin_cli.cli, ["list-indexes", "friend_invites"])
    assert "ix_friend_invites_to_status" in indexes.output

    constraints = runner.invoke(admin_cli.cli, ["inspect-constraints", "user_friends"])
    assert "uniq_user_friend" in constraints.output
    assert "FOREIGN KEY (user_id) -> users(id)" in constraints.output

    assert runner.invoke(admin_cli.cli, ["list-indexes", "nope"]).exit_code != 0


def test_public_id_checks(runner, make_user):
    user = make_user()
    assert runner.invoke(admin_cli.cli, ["check-public-ids"]).exit_code == 0

    Profile.query.filter_by(id=user.id).update({"public_id": "abc"})
    db.session.commit()
    failing = runner.invoke(admin_cli.cli, ["check-public-ids"])
    assert failing.exit_code != 0
    assert "Invalid public ids: 1" in failing.output

    backfill = runner.invoke(admin_cli.cli, ["backfill-public-ids"])
    assert "Backfilled 1 profile(s)" in backfill.output
    assert runner.invoke(admin_cli.cli, ["check-public-ids"]).exit_code == 0


def test_presence_sweep(runner, make_user):
    user = make_user()
    set_online_status(user.id, True)

    result = runner.invoke(admin_cli.cli, ["presence-sweep", "--timeout", "3600"])
    assert "Marked 0 profile(s) offline" in result.output


def test_verify_username_slug_is_deprecated(runner):
    result = runner.invoke(admin_cli.cli, ["verify-username-slug"])
    assert result.exit_code == 0
    assert "deprecated" in result.output
