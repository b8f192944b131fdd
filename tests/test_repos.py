import math
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.orm import Session

import jobboard.repos.application_repo as arepo
import jobboard.repos.job_repo as jrepo
import jobboard.repos.user_repo as urepo
from jobboard.core.exceptions import (
    ApplicationNotFoundError,
    DuplicateApplicationError,
    DuplicateUsernameError,
    InvalidStatusError,
    NotFoundOrAlreadyAdminError,
)
from jobboard.models.application import Application
from jobboard.repos.job_repo import JobFilter

from conftest import make_job, make_user


def _posted(minutes_ago: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)


@pytest.fixture
def board(db_session):
    """Five live jobs and one archived one, with distinct posting times."""
    jobs = [
        make_job(db_session, title="Python Developer", location="Remote", tags="python,backend", date_posted=_posted(50)),
        make_job(db_session, title="Frontend Developer", location="Berlin", tags="react,frontend", date_posted=_posted(40)),
        make_job(db_session, title="Data Engineer", company_description="Big data shop", location="Remote", tags="python,spark", date_posted=_posted(30)),
        make_job(db_session, title="QA Analyst", location="London", tags="testing", date_posted=_posted(20)),
        make_job(db_session, title="DevOps", company_description="Cloud developer tooling", location="remote-first", tags="k8s", date_posted=_posted(10)),
        make_job(db_session, title="Old Python Developer", location="Remote", tags="python", is_archived=True, date_posted=_posted(5)),
    ]
    return jobs


# ---- users ----
def test_user_create_and_duplicate(db_session):
    user = urepo.create(db_session, "alice", "Passw0rd1")
    assert user.id is not None and user.role == "user"
    assert user.password_hash != "Passw0rd1"
    with pytest.raises(DuplicateUsernameError):
        urepo.create(db_session, "alice", "another1")
    assert len(urepo.get_all_users(db_session)) == 1


def test_user_create_constraint_race(db_session, monkeypatch):
    make_user(db_session, "bob")
    # Pre-check misses the row, as it would under a concurrent insert.
    monkeypatch.setattr(urepo, "get_by_username", lambda db, username: None)
    with pytest.raises(DuplicateUsernameError):
        urepo.create(db_session, "bob", "Passw0rd1")


def test_promote_only_touches_plain_users(db_session):
    user = make_user(db_session, "carol")
    urepo.promote_to_admin(db_session, user.id)
    db_session.expire_all()
    assert urepo.get_by_id(db_session, user.id).role == "admin"
    with pytest.raises(NotFoundOrAlreadyAdminError):
        urepo.promote_to_admin(db_session, user.id)
    with pytest.raises(NotFoundOrAlreadyAdminError):
        urepo.promote_to_admin(db_session, 9999)


# ---- jobs ----
def test_list_public_excludes_archived_newest_first(db_session, board):
    items, total = jrepo.list_public(db_session, JobFilter(), limit=10, offset=0)
    assert total == 5
    assert [j.title for j in items] == [
        "DevOps",
        "QA Analyst",
        "Data Engineer",
        "Frontend Developer",
        "Python Developer",
    ]


def test_search_matches_title_or_company_description(db_session, board):
    items, total = jrepo.list_public(db_session, JobFilter(search="DEVELOPER"), limit=10, offset=0)
    titles = {j.title for j in items}
    assert titles == {"Python Developer", "Frontend Developer", "DevOps"}
    assert total == 3


def test_filters_are_anded(db_session, board):
    items, total = jrepo.list_public(db_session, JobFilter(location="remote", tags="python"), limit=10, offset=0)
    assert {j.title for j in items} == {"Python Developer", "Data Engineer"}
    assert total == 2


def test_blank_filters_are_ignored(db_session, board):
    _, total = jrepo.list_public(db_session, JobFilter(search="  ", location="", tags=None), limit=10, offset=0)
    assert total == 5


def test_wildcard_characters_match_literally(db_session):
    make_job(db_session, title="Backend Engineer")
    make_job(db_session, title="C_Sharp Dev", location="100% remote", tags="c_sharp")

    items, total = jrepo.list_public(db_session, JobFilter(search="_"), limit=10, offset=0)
    assert [j.title for j in items] == ["C_Sharp Dev"]
    assert total == 1

    _, total = jrepo.list_public(db_session, JobFilter(search="%"), limit=10, offset=0)
    assert total == 0
    _, total = jrepo.list_public(db_session, JobFilter(location="%"), limit=10, offset=0)
    assert total == 1
    _, total = jrepo.list_public(db_session, JobFilter(tags="_"), limit=10, offset=0)
    assert total == 1


@pytest.mark.parametrize(
    "filters",
    [JobFilter(), JobFilter(search="developer"), JobFilter(location="remote"), JobFilter(tags="python")],
)
def test_pages_never_exceed_limit_and_total_matches_filter(db_session, board, filters):
    limit = 2
    _, total = jrepo.list_public(db_session, filters, limit=limit, offset=0)
    seen = []
    for page in range(1, math.ceil(total / limit) + 2):
        items, page_total = jrepo.list_public(db_session, filters, limit=limit, offset=(page - 1) * limit)
        assert len(items) <= limit
        assert page_total == total
        seen.extend(j.id for j in items)
    assert len(seen) == len(set(seen)) == total


def test_archive_hides_from_public_but_not_admin(db_session, board):
    target = board[0]
    assert jrepo.archive(db_session, target.id) is True
    assert jrepo.get_public_by_id(db_session, target.id) is None
    items, _ = jrepo.list_public(db_session, JobFilter(), limit=10, offset=0)
    assert target.id not in {j.id for j in items}
    assert target.id in {j.id for j in jrepo.get_all(db_session)}
    assert jrepo.archive(db_session, 9999) is False


def test_admin_list_includes_archived(db_session, board):
    all_jobs = jrepo.get_all(db_session)
    assert len(all_jobs) == 6
    assert all_jobs[0].title == "Old Python Developer"


def test_create_sets_posting_defaults(db_session):
    job = jrepo.create(
        db_session,
        title="SRE",
        company_name="Acme",
        company_description="Ops",
        job_description="Keep it up",
        location="Remote",
    )
    assert job.is_archived is False
    assert job.date_posted is not None


def test_update_is_full_overwrite(db_session):
    job = make_job(db_session, salary="$1", tags="a,b")
    fields = dict(
        title="New Title",
        company_name="NewCo",
        company_description="Desc",
        job_description="JD",
        location="Paris",
    )
    updated = jrepo.update(db_session, job.id, **fields)
    assert updated.title == "New Title"
    assert updated.salary is None and updated.tags is None and updated.deadline is None
    again = jrepo.update(db_session, job.id, **fields)
    assert again.title == "New Title"
    assert jrepo.update(db_session, 9999, **fields) is None


# ---- applications ----
def test_application_unique_per_job_and_user(db_session):
    user = make_user(db_session, "dave")
    job = make_job(db_session)
    first = arepo.create(db_session, job.id, user.id, "Hello", "/uploads/cvs/a.pdf")
    assert first.status == "pending"
    with pytest.raises(DuplicateApplicationError):
        arepo.create(db_session, job.id, user.id, "Again", "/uploads/cvs/b.pdf")
    count = (
        db_session.query(Application)
        .filter(Application.job_id == job.id, Application.user_id == user.id)
        .count()
    )
    assert count == 1


def test_application_listings_join_details(db_session):
    alice = make_user(db_session, "alice")
    bob = make_user(db_session, "bob")
    job1 = make_job(db_session, title="Job One", company_name="One Inc")
    job2 = make_job(db_session, title="Job Two", company_name="Two Inc")
    arepo.create(db_session, job1.id, alice.id, "a1", "/uploads/cvs/1.pdf")
    arepo.create(db_session, job1.id, bob.id, "b1", "/uploads/cvs/2.pdf")
    arepo.create(db_session, job2.id, alice.id, "a2", "/uploads/cvs/3.pdf")

    for_job = arepo.get_for_job(db_session, job1.id)
    assert {a["username"] for a in for_job} == {"alice", "bob"}

    everything = arepo.get_all(db_session)
    assert len(everything) == 3
    assert everything[0]["job_title"] == "Job Two"
    assert everything[0]["company_name"] == "Two Inc"

    mine = arepo.get_for_user(db_session, alice.id)
    assert {a["job_id"] for a in mine} == {job1.id, job2.id}
    assert all("job_title" in a for a in mine)


def test_update_status_rules(db_session: Session):
    user = make_user(db_session, "erin")
    job = make_job(db_session)
    app = arepo.create(db_session, job.id, user.id, "Hi", "/uploads/cvs/x.pdf")

    with pytest.raises(InvalidStatusError):
        arepo.update_status(db_session, app.id, "hired")
    db_session.expire_all()
    assert arepo.get_by_id(db_session, app.id).status == "pending"

    # No transition graph: any status may follow any other.
    for status in ("accepted", "pending", "rejected", "reviewed", "accepted"):
        assert arepo.update_status(db_session, app.id, status).status == status

    with pytest.raises(ApplicationNotFoundError):
        arepo.update_status(db_session, 9999, "accepted")
