import itertools

from use_cases import partial_session
from use_cases.session_models import PartialSessionScenario, UserInfo


def _user(**flags) -> UserInfo:
    return UserInfo(id="u1", login="alice", **flags)


def test_fully_usable_account_has_no_scenario() -> None:
    assert partial_session.resolve(_user()) is None


def test_each_flag_alone_maps_to_its_scenario() -> None:
    assert partial_session.resolve(_user(needs_revalidate_terms=True)) == PartialSessionScenario.MUST_REVALIDATE_TERMS
    assert partial_session.resolve(_user(must_change_password=True)) == PartialSessionScenario.MUST_CHANGE_PASSWORD
    assert (
        partial_session.resolve(_user(requires_mobile_verification=True))
        == PartialSessionScenario.MUST_VERIFY_MOBILE
    )
    assert (
        partial_session.resolve(_user(requires_email_verification=True))
        == PartialSessionScenario.MUST_VERIFY_EMAIL
    )


def test_validated_contact_does_not_block() -> None:
    assert partial_session.resolve(_user(requires_mobile_verification=True, mobile_validated=True)) is None
    assert partial_session.resolve(_user(requires_email_verification=True, email_validated=True)) is None


def test_highest_priority_wins_for_every_flag_combination() -> None:
    names = [
        "needs_revalidate_terms",
        "must_change_password",
        "requires_mobile_verification",
        "requires_email_verification",
    ]
    expected_order = [
        PartialSessionScenario.MUST_REVALIDATE_TERMS,
        PartialSessionScenario.MUST_CHANGE_PASSWORD,
        PartialSessionScenario.MUST_VERIFY_MOBILE,
        PartialSessionScenario.MUST_VERIFY_EMAIL,
    ]
    for values in itertools.product([False, True], repeat=len(names)):
        user = _user(**dict(zip(names, values)))
        result = partial_session.resolve(user)
        if not any(values):
            assert result is None
        else:
            assert result == expected_order[values.index(True)]


def test_resolve_is_total() -> None:
    assert partial_session.resolve(None) is None

    class Bare:
        pass

    assert partial_session.resolve(Bare()) is None


def test_user_info_from_payload_reads_restriction_flags() -> None:
    user = UserInfo.from_payload(
        {
            "userId": "42",
            "login": "bob",
            "username": "Bob Martin",
            "type": ["Personnel"],
            "forceChangePassword": True,
            "needRevalidateMobile": True,
            "mobileState": {"state": "pending"},
            "needRevalidateEmail": True,
            "emailState": {"state": "valid"},
        }
    )
    assert user.id == "42"
    assert user.profile_type == "Personnel"
    assert user.must_change_password is True
    assert user.mobile_validated is False
    assert user.email_validated is True
    assert partial_session.resolve(user) == PartialSessionScenario.MUST_CHANGE_PASSWORD
