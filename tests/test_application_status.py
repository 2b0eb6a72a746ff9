import pytest

from job_board.models.application import (
    ApplicationStatus,
    SubmissionRefused,
    build_application_request,
    can_reject,
    can_withdraw,
    count_by_status,
    filter_by_status,
    group_by_status,
    normalize_status,
    normalize_status_counts,
    owned_by_employer,
    parse_status_filter,
    statistics_consistent,
)
from job_board.models.user import UserRole
from job_board.schemas.application import ApplicationResponse, ApplicationStatistics
from job_board.schemas.vacancy import Vacancy
from job_board.session import Session


def _app(app_id=1, status="NEW", employer_id=1, candidate_id=10):
    return ApplicationResponse(
        id=app_id,
        vacancy_id=5,
        candidate_id=candidate_id,
        resume_id=7,
        employer_id=employer_id,
        status_name=status,
    )


def _session(user_id, role):
    return Session(token="t", user_id=user_id, user_role=role, expires_at=None)


def test_normalize_status_folds_every_vocabulary():
    assert normalize_status("NEW") is ApplicationStatus.NEW
    assert normalize_status("PENDING") is ApplicationStatus.NEW
    assert normalize_status("Новый") is ApplicationStatus.NEW
    assert normalize_status("Отказ") is ApplicationStatus.REJECTED
    assert normalize_status("rejected") is ApplicationStatus.REJECTED
    assert normalize_status("Отозван") is ApplicationStatus.WITHDRAWN
    assert normalize_status("ApplicationStatus.WITHDRAWN") is ApplicationStatus.WITHDRAWN
    assert normalize_status("accepted") is ApplicationStatus.ACCEPTED


def test_normalize_status_unknown_values():
    assert normalize_status(None) is ApplicationStatus.UNKNOWN
    assert normalize_status("") is ApplicationStatus.UNKNOWN
    assert normalize_status("ARCHIVED") is ApplicationStatus.UNKNOWN


def test_parse_status_filter_treats_all_and_garbage_as_no_filter():
    assert parse_status_filter(None) is None
    assert parse_status_filter("ALL") is None
    assert parse_status_filter("bogus") is None
    assert parse_status_filter("pending") is ApplicationStatus.NEW


def test_filter_by_status_matches_aliases():
    apps = [_app(1, "NEW"), _app(2, "PENDING"), _app(3, "Отказ")]
    assert [a.id for a in filter_by_status(apps, ApplicationStatus.NEW)] == [1, 2]
    assert [a.id for a in filter_by_status(apps, None)] == [1, 2, 3]


def test_count_by_status_includes_zero_buckets():
    counts = count_by_status([_app(1, "NEW"), _app(2, "Отозван")])
    assert counts[ApplicationStatus.NEW] == 1
    assert counts[ApplicationStatus.WITHDRAWN] == 1
    assert counts[ApplicationStatus.ACCEPTED] == 0
    assert sum(counts.values()) == 2


def test_group_by_status_keeps_empty_buckets_and_unknowns():
    groups = group_by_status([_app(1, "NEW"), _app(2, "ARCHIVED")])
    by_status = {g["status"]: g["count"] for g in groups}
    assert by_status[ApplicationStatus.NEW] == 1
    assert by_status[ApplicationStatus.REJECTED] == 0
    assert by_status[ApplicationStatus.UNKNOWN] == 1


def test_reject_requires_owning_employer_and_initial_status():
    employer = _session(1, UserRole.EMPLOYER)
    assert can_reject(_app(status="NEW", employer_id=1), employer)
    assert not can_reject(_app(status="NEW", employer_id=2), employer)
    assert not can_reject(_app(status="REJECTED", employer_id=1), employer)
    assert not can_reject(_app(status="NEW", employer_id=1), _session(1, UserRole.JOB_SEEKER))
    assert not can_reject(_app(status="NEW", employer_id=1), Session.anonymous())


def test_withdraw_requires_owning_candidate_and_initial_status():
    seeker = _session(10, UserRole.JOB_SEEKER)
    assert can_withdraw(_app(status="PENDING", candidate_id=10), seeker)
    assert not can_withdraw(_app(status="NEW", candidate_id=11), seeker)
    assert not can_withdraw(_app(status="WITHDRAWN", candidate_id=10), seeker)
    assert not can_withdraw(_app(status="NEW", candidate_id=10), _session(10, UserRole.EMPLOYER))


def test_owned_by_employer_drops_other_tenants():
    apps = [_app(1, employer_id=1), _app(2, employer_id=2), _app(3, employer_id=None)]
    assert [a.id for a in owned_by_employer(apps, 1)] == [1, 3]


def test_reject_falls_back_to_vacancy_owner():
    employer = _session(1, UserRole.EMPLOYER)
    ownerless = _app(status="NEW", employer_id=None)
    assert can_reject(ownerless, employer, Vacancy(id=5, title="Py", employer_id=1))
    assert not can_reject(ownerless, employer, Vacancy(id=5, title="Go", employer_id=2))
    assert not can_reject(ownerless, employer)


def test_statistics_consistent_with_localized_keys():
    apps = [_app(1, "NEW"), _app(2, "Отказ")]
    stats = ApplicationStatistics(total_applications=2, applications_by_status={"PENDING": 1, "REJECTED": 1})
    assert statistics_consistent(stats, apps)


def test_statistics_inconsistent_when_totals_disagree():
    apps = [_app(1, "NEW")]
    stats = ApplicationStatistics(total_applications=3, applications_by_status={"NEW": 3})
    assert not statistics_consistent(stats, apps)


def test_normalize_status_counts_merges_aliases():
    counts = normalize_status_counts({"NEW": 2, "Новый": 1, "Отказ": 4})
    assert counts[ApplicationStatus.NEW] == 3
    assert counts[ApplicationStatus.REJECTED] == 4


def test_build_application_request_carries_vacancy_owner():
    vacancy = Vacancy(id=3, title="Go", employer_id=2, is_published=True)
    payload = build_application_request(vacancy, _session(10, UserRole.JOB_SEEKER), 20)
    assert payload == {"vacancy_id": 3, "employer_id": 2, "candidate_id": 10, "resume_id": 20}


@pytest.mark.parametrize(
    "session, resume_id, vacancy, message",
    [
        (_session(1, UserRole.EMPLOYER), 20, Vacancy(id=3, title="Go"), "Only job seekers can apply to vacancies"),
        (_session(10, UserRole.JOB_SEEKER), None, Vacancy(id=3, title="Go"), "Please select a resume"),
        (_session(10, UserRole.JOB_SEEKER), 20, None, "Vacancy not found"),
        (_session(10, UserRole.JOB_SEEKER), 20, Vacancy(id=3, title="Go", is_published=False),
         "This vacancy is not published"),
    ],
)
def test_build_application_request_refusals(session, resume_id, vacancy, message):
    with pytest.raises(SubmissionRefused, match=message):
        build_application_request(vacancy, session, resume_id)
