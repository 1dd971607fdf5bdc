"""Subjects and HTML bodies for outgoing mail. Each builder returns ``(subject, html)``."""

from datetime import datetime
from html import escape
from typing import Tuple

from foodshare.models import Organization, Pickup, User

_LAYOUT = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <style>
    body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; line-height: 1.6; color: #333;
            max-width: 600px; margin: 0 auto; padding: 20px; }}
    .header {{ text-align: center; padding: 20px 0; border-bottom: 1px solid #eee; }}
    .header h1 {{ color: #4caf50; margin: 0; }}
    .content {{ padding: 20px 0; }}
    .button {{ display: inline-block; background-color: #4caf50; color: white; text-decoration: none;
              padding: 10px 20px; border-radius: 4px; margin: 20px 0; }}
    .footer {{ text-align: center; color: #777; font-size: 12px; padding-top: 20px; border-top: 1px solid #eee; }}
  </style>
</head>
<body>
  <div class="header">
    <h1>FoodShare</h1>
    <p>Connecting food with those who need it most</p>
  </div>
  <div class="content">
    {content}
  </div>
  <div class="footer">
    <p>&copy; {year} FoodShare. All rights reserved.</p>
    <p>This email was sent to you because you registered on our platform.</p>
  </div>
</body>
</html>
"""


def render(content: str) -> str:
    return _LAYOUT.format(content=content, year=datetime.now().year)


def _link(url: str, label: str) -> str:
    url = escape(url, quote=True)
    return (
        f'<p><a href="{url}" class="button">{label}</a></p>\n'
        f"    <p>Or copy and paste this link in your browser: {url}</p>"
    )


def verification_email(base_url: str, token: str) -> Tuple[str, str]:
    url = f"{base_url.rstrip('/')}/verify-email?token={token}"
    content = f"""<h2>Welcome to FoodShare!</h2>
    <p>Thank you for registering. Please verify your email address to complete your registration.</p>
    {_link(url, "Verify Email Address")}"""
    return "Verify your FoodShare account", render(content)


def password_reset_email(base_url: str, token: str) -> Tuple[str, str]:
    url = f"{base_url.rstrip('/')}/reset-password?token={token}"
    content = f"""<h2>Reset Your Password</h2>
    <p>You requested a password reset. Click the button below to create a new password:</p>
    {_link(url, "Reset Password")}
    <p>This link will expire in 1 hour. If you didn't request this, please ignore this email.</p>"""
    return "Reset your FoodShare password", render(content)


def _pickup_details(pickup: Pickup) -> str:
    return f"""<p><strong>Food:</strong> {escape(pickup.title)}</p>
    <p><strong>Pickup Window:</strong> {pickup.pickup_time:%Y-%m-%d %H:%M} - {pickup.pickup_end_time:%H:%M} UTC</p>
    <p><strong>Pickup Address:</strong> {escape(pickup.address)}, {escape(pickup.city)}</p>
    <p><strong>Delivery Location:</strong> {escape(pickup.destination)}</p>"""


def pickup_confirmation_email(base_url: str, pickup: Pickup) -> Tuple[str, str]:
    content = f"""<h2>Pickup Confirmation</h2>
    <p>You have successfully accepted a food pickup:</p>
    {_pickup_details(pickup)}
    {_link(f"{base_url.rstrip('/')}/volunteer-dashboard", "View on Dashboard")}
    <p>Thank you for helping reduce food waste and hunger in our community!</p>"""
    return "Pickup Confirmation", render(content)


def ngo_assignment_email(base_url: str, pickup: Pickup, volunteer: User, org: Organization) -> Tuple[str, str]:
    content = f"""<h2>Volunteer Assigned to Your Food Listing</h2>
    <p>A volunteer has been assigned to a pickup for {escape(org.organization_name)}:</p>
    {_pickup_details(pickup)}
    <p><strong>Volunteer:</strong> {escape(volunteer.first_name)} {escape(volunteer.last_name)}</p>
    {_link(f"{base_url.rstrip('/')}/ngo-dashboard", "View on Dashboard")}
    <p>Thank you for partnering with FoodShare to reduce food waste!</p>"""
    return "Volunteer Assigned to Your Food Donation", render(content)
