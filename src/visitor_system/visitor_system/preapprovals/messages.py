from __future__ import annotations

from .model import PreApproval


def invite_email(pa: PreApproval) -> str:
    return (
        f"Dear {pa.visitor.name},\n\n"
        f"Your visit to {pa.host_name} has been pre-approved!\n\n"
        "Visit Details:\n"
        f"- Date: {pa.scheduled_date:%Y-%m-%d}\n"
        f"- Time: {pa.scheduled_date:%H:%M}\n"
        f"- Purpose: {pa.purpose}\n"
        f"- Access Code: {pa.access_code}\n\n"
        "Please present this access code at the security checkpoint.\n\n"
        f"Valid until: {pa.expires_at:%Y-%m-%d %H:%M}\n\n"
        "Best regards,\n"
        "Visitor Management Team"
    )


def invite_sms(pa: PreApproval) -> str:
    return (
        f"VMS: Visit pre-approved. Host: {pa.host_name}. Date: {pa.scheduled_date:%Y-%m-%d}. "
        f"Code: {pa.access_code}. Valid until: {pa.expires_at:%Y-%m-%d}"
    )


def reminder_sms(pa: PreApproval) -> str:
    return (
        f"VMS reminder: your visit to {pa.host_name} is scheduled for "
        f"{pa.scheduled_date:%Y-%m-%d %H:%M}. Code: {pa.access_code}."
    )
