"""
Signature Email Templates

HTML bodies for the signature request and confirmation emails.
All interpolated values are escaped.
"""

from datetime import datetime
from html import escape
from typing import Iterable, Optional

from src.domain.entities import SignatureAuditEntry


def format_timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S UTC")


def format_date(value: datetime) -> str:
    return value.strftime("%A, %B %d, %Y")


def render_signature_request_email(
    signer_name: str,
    requested_by: str,
    document_name: str,
    signature_url: str,
    requested_at: datetime,
    ttl_days: int,
    support_email: str,
    message: Optional[str] = None,
) -> str:
    message_html = ""
    if message:
        message_html = f"""
            <div class="message">
                <strong>Message from {escape(requested_by)}:</strong>
                <p style="margin: 10px 0 0 0;">{escape(message)}</p>
            </div>
        """

    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="UTF-8">
        <title>Document Signature Request</title>
        <style>
            body {{ font-family: Arial, sans-serif; background-color: #f5f5f5; margin: 0; padding: 0; }}
            .container {{ max-width: 600px; margin: 0 auto; background: #ffffff; border-radius: 8px; overflow: hidden; }}
            .header {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: #ffffff; padding: 40px 30px; text-align: center; }}
            .content {{ padding: 40px 30px; }}
            .document-info {{ background: #f8f9fa; border-left: 4px solid #667eea; padding: 20px; margin: 25px 0; }}
            .message {{ background: #f0f8ff; border-left: 4px solid #0066cc; padding: 15px; margin: 20px 0; }}
            .button {{ display: inline-block; background: #667eea; color: #ffffff; padding: 16px 40px; text-decoration: none; border-radius: 6px; font-weight: 600; }}
            .expiry-notice {{ color: #dc3545; font-weight: 600; margin-top: 15px; }}
            .footer {{ background: #f8f9fa; text-align: center; padding: 25px; color: #6c757d; font-size: 13px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1 style="margin: 0;">Signature Request</h1>
                <p style="margin: 10px 0 0 0;">PulseCRM Document Management</p>
            </div>
            <div class="content">
                <p>Hello {escape(signer_name)},</p>
                <p>{escape(requested_by)} has requested your signature on the following document:</p>
                <div class="document-info">
                    <strong>{escape(document_name)}</strong><br>
                    Requested on: {format_date(requested_at)}
                </div>
                {message_html}
                <p style="text-align: center;">
                    <a href="{escape(signature_url, quote=True)}" class="button">Review &amp; Sign Document</a>
                </p>
                <p class="expiry-notice">This signature request will expire in {ttl_days} days</p>
                <p style="font-size: 14px; color: #6c757d;">
                    <strong>What happens next?</strong><br>
                    1. Click the button above to review the document<br>
                    2. Type your full name to create your signature<br>
                    3. Click "Sign Document" to complete the process<br>
                    4. You'll receive a copy of the signed document via email
                </p>
            </div>
            <div class="footer">
                <p>This email was sent by PulseCRM Document Management System</p>
                <p>If you have questions, please contact <a href="mailto:{escape(support_email, quote=True)}">support</a></p>
                <p>&copy; {requested_at.year} PulseCRM. All rights reserved.</p>
            </div>
        </div>
    </body>
    </html>
    """


def render_audit_trail(entries: Iterable[SignatureAuditEntry]) -> str:
    items = "".join(
        f"<li>{escape(entry.action)} - {format_timestamp(entry.timestamp)}</li>"
        for entry in entries
    )
    return f"<ul>{items}</ul>"


def render_signer_confirmation_email(
    signer_name: str,
    document_name: str,
    request_id: str,
    signed_at: datetime,
    audit_entries: Iterable[SignatureAuditEntry],
) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; background-color: #f5f5f5; }}
            .container {{ max-width: 600px; margin: 0 auto; background-color: #ffffff; padding: 30px; }}
            .header {{ background-color: #28a745; color: white; padding: 20px; text-align: center; border-radius: 8px 8px 0 0; }}
            .content {{ padding: 30px; }}
            .details {{ background-color: #f8f9fa; padding: 20px; border-radius: 8px; margin: 20px 0; }}
            .footer {{ text-align: center; color: #6c757d; font-size: 12px; padding: 20px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>Document Signed Successfully</h1>
            </div>
            <div class="content">
                <p>Hello {escape(signer_name)},</p>
                <p>You have successfully signed the following document:</p>
                <div class="details">
                    <strong>Document:</strong> {escape(document_name)}<br>
                    <strong>Signed on:</strong> {format_timestamp(signed_at)}<br>
                    <strong>Document ID:</strong> {escape(request_id)}
                </div>
                <p>A copy of the signed document is attached to this email for your records.</p>
                <p><strong>Audit Trail:</strong></p>
                {render_audit_trail(audit_entries)}
            </div>
            <div class="footer">
                <p>This is a legally binding electronic signature.</p>
                <p>&copy; {signed_at.year} PulseCRM. All rights reserved.</p>
            </div>
        </div>
    </body>
    </html>
    """


def render_requester_confirmation_email(
    signer_name: str, document_name: str, signed_at: datetime
) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: Arial, sans-serif; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 30px; }}
            .header {{ background-color: #28a745; color: white; padding: 20px; text-align: center; }}
            .content {{ padding: 20px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>Document Signature Completed</h1>
            </div>
            <div class="content">
                <p><strong>{escape(signer_name)}</strong> has signed the document:</p>
                <p><strong>{escape(document_name)}</strong></p>
                <p>Signed on: {format_timestamp(signed_at)}</p>
                <p>The signed document is attached.</p>
            </div>
        </div>
    </body>
    </html>
    """
