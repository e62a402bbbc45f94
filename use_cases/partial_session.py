"""Classification of an account into full or restricted (partial) session."""

from typing import Optional

from use_cases.session_models import PartialSessionScenario, UserInfo


def _flag(user_info: UserInfo, name: str) -> bool:
    return bool(getattr(user_info, name, False))


def resolve(user_info: Optional[UserInfo]) -> Optional[PartialSessionScenario]:
    """
    Return the single blocking step the account must go through, or None.
    Checks run in priority order and the first match wins.
    """
    if user_info is None:
        return None
    if _flag(user_info, "needs_revalidate_terms"):
        return PartialSessionScenario.MUST_REVALIDATE_TERMS
    if _flag(user_info, "must_change_password"):
        return PartialSessionScenario.MUST_CHANGE_PASSWORD
    if _flag(user_info, "requires_mobile_verification") and not _flag(user_info, "mobile_validated"):
        return PartialSessionScenario.MUST_VERIFY_MOBILE
    if _flag(user_info, "requires_email_verification") and not _flag(user_info, "email_validated"):
        return PartialSessionScenario.MUST_VERIFY_EMAIL
    return None
