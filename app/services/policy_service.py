"""
Policy Service
Resolves the effective approval mode, notification recipients and lunch-break
policy for a company/site pair. Nothing here is cached: settings may change
between submission and approval, so callers resolve on every run.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from app.extensions import db
from app.models import Company, Site
from app.utils.time_calc import LunchBreakPolicy, DEFAULT_LUNCH_POLICY

logger = logging.getLogger(__name__)

MODE_MANUAL = 'manual'
MODE_AUTO = 'auto'
MODE_INHERIT = 'default'  # site-only: use the company settings


@dataclass(frozen=True)
class ApprovalPolicy:
    mode: str = MODE_MANUAL
    emails: List[str] = field(default_factory=list)

    @property
    def is_auto(self):
        return self.mode == MODE_AUTO


def _clean_emails(emails) -> List[str]:
    if not emails:
        return []
    return [e.strip() for e in emails if isinstance(e, str) and e.strip()]


def _company_policy(company_settings: Optional[dict]) -> ApprovalPolicy:
    if not company_settings:
        return ApprovalPolicy()
    return ApprovalPolicy(
        mode=company_settings.get('mode') or MODE_MANUAL,
        emails=_clean_emails(company_settings.get('auto_approval_emails')),
    )


def merge_approval_policy(company_settings: Optional[dict],
                          site_settings: Optional[dict] = None,
                          has_site: bool = False) -> ApprovalPolicy:
    """
    Combine company and site approval settings.

    The site mode wins unless it is absent or "default". Recipients are
    decided separately: the site list when non-empty, else the company list.
    """
    company_policy = _company_policy(company_settings)
    if not has_site or not site_settings:
        return company_policy

    site_mode = site_settings.get('mode')
    if not site_mode or site_mode == MODE_INHERIT:
        return company_policy

    site_emails = _clean_emails(site_settings.get('auto_approval_emails'))
    return ApprovalPolicy(
        mode=site_mode,
        emails=site_emails or list(company_policy.emails),
    )


def resolve_approval_policy(company_id, site_id=None) -> ApprovalPolicy:
    """Load settings and resolve the approval policy; missing records mean defaults"""
    company = db.session.get(Company, company_id) if company_id is not None else None
    company_settings = company.approval_settings if company else None
    if company is None:
        logger.info(f"Company {company_id} not found, using default approval policy")

    if not site_id:
        return merge_approval_policy(company_settings)

    site = db.session.get(Site, site_id)
    if site is None or site.company_id != company_id:
        return merge_approval_policy(company_settings)
    return merge_approval_policy(company_settings, site.approval_settings, has_site=True)


def _lunch_policy_from(settings: dict) -> LunchBreakPolicy:
    deduct = settings.get('deduct_lunch_break')
    minutes = settings.get('lunch_break_minutes')
    return LunchBreakPolicy(
        deduct_lunch_break=DEFAULT_LUNCH_POLICY.deduct_lunch_break if deduct is None else bool(deduct),
        lunch_break_minutes=DEFAULT_LUNCH_POLICY.lunch_break_minutes if minutes is None else int(minutes),
    )


def resolve_lunch_break_policy(company=None, site=None) -> LunchBreakPolicy:
    """Site settings if present, else company settings, else the default"""
    if site is not None and site.attendance_settings:
        return _lunch_policy_from(site.attendance_settings)
    if company is not None and company.attendance_settings:
        return _lunch_policy_from(company.attendance_settings)
    return DEFAULT_LUNCH_POLICY
