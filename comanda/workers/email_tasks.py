"""
Email background tasks.

Staff invitation emails sent through Resend.
"""

from datetime import datetime
from html import escape

from comanda.workers.celery_app import celery_app

ROLE_LABELS = {
    "manager": "Manager",
    "cashier": "Cashier",
    "waiter": "Waiter",
    "kitchen": "Kitchen",
}


def render_invitation_html(
    org_name: str,
    inviter_name: str,
    role: str,
    invite_url: str,
    expires_at: str,
) -> str:
    expires_on = datetime.fromisoformat(expires_at).strftime("%d/%m/%Y")
    return f"""
        <h2>You've been invited to {escape(org_name)}</h2>
        <p><strong>{escape(inviter_name)}</strong> has invited you to join the team at
        <strong>{escape(org_name)}</strong> as <strong>{ROLE_LABELS.get(role, escape(role))}</strong>.</p>
        <p>
            <a href="{escape(invite_url, quote=True)}"
               style="background:#146E37;color:#fff;padding:12px 24px;
                      border-radius:6px;text-decoration:none;display:inline-block;">
                Accept Invitation
            </a>
        </p>
        <p>This invitation expires on {expires_on}.</p>
        <p>If you did not expect this invitation, you can safely ignore this email.</p>
    """


@celery_app.task(name="comanda.workers.email_tasks.send_invitation_email", bind=True, max_retries=3)
def send_invitation_email(
    self,  # type: ignore[no-untyped-def]
    to_email: str,
    org_name: str,
    inviter_name: str,
    role: str,
    invite_url: str,
    expires_at: str,
) -> dict[str, str]:
    """
    Send a staff invitation email via Resend.

    Args:
        to_email: Recipient email address.
        org_name: Restaurant display name.
        inviter_name: Display name of the person who sent the invite.
        role: Role being offered (manager/cashier/waiter/kitchen).
        invite_url: Link to the invitation landing page.
        expires_at: ISO-8601 expiry of the invitation.

    Returns:
        Dict with status and message_id.
    """
    try:
        import resend

        from comanda.core.config import settings

        resend.api_key = settings.RESEND_API_KEY

        params: resend.Emails.SendParams = {
            "from": settings.EMAIL_FROM,
            "to": [to_email],
            "subject": f"You've been invited to join {org_name} on Comanda",
            "html": render_invitation_html(org_name, inviter_name, role, invite_url, expires_at),
        }

        response = resend.Emails.send(params)
        return {"status": "sent", "message_id": response["id"]}

    except Exception as exc:
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))
