from __future__ import annotations

from atelier.services.email_templates import (
    ROLE_DESCRIPTIONS,
    render_base,
    render_invitation,
    render_password_reset,
    render_quote_ready,
    render_welcome,
)
from atelier.services.mailer import DryRunMailer, EmailMessage


def test_base_layout_wraps_content():
    html = render_base("<p>hola</p>")
    assert html.startswith("<!DOCTYPE html>")
    assert "<p>hola</p>" in html
    assert "Gestión Integral para Estudios de Arquitectura" in html


def test_invitation_escapes_user_values():
    html = render_invitation(
        "<script>alert(1)</script>",
        "Estudio & Co",
        'https://app.atelier.mx/auth/accept-invite?token=a"b',
        "editor",
    )
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "Estudio &amp; Co" in html
    assert 'token=a&quot;b"' in html
    assert ROLE_DESCRIPTIONS["editor"] in html


def test_invitation_unknown_role_falls_back_to_name():
    html = render_invitation("Diego", "Estudio", "https://x", "auditor")
    assert "<strong>auditor</strong>" in html


def test_welcome_with_and_without_inviter():
    plain = render_welcome("Ana", app_url="https://app.atelier.mx")
    assert "Gracias por registrarte" in plain
    assert 'href="https://app.atelier.mx/dashboard"' in plain

    invited = render_welcome("Ana", "Diego <Admin>", app_url="https://app.atelier.mx")
    assert "Diego &lt;Admin&gt; te ha invitado" in invited


def test_password_reset_shows_url_twice():
    html = render_password_reset("https://app.atelier.mx/reset?t=1&u=2")
    assert html.count("https://app.atelier.mx/reset?t=1&amp;u=2") == 2


def test_quote_ready_table():
    html = render_quote_ready("Cliente <SA>", "Casa Lago", "https://q", "$450,000 MXN")
    assert "Cliente &lt;SA&gt;" in html
    assert "<td>Casa Lago</td>" in html
    assert "<td>$450,000 MXN</td>" in html


def test_dry_run_mailer_outbox():
    mailer = DryRunMailer(default_from="Atelier <no-reply@atelier.mx>")
    result = mailer.send(EmailMessage(to="ana@estudio.mx", subject="Hola", html="<p/>"))
    assert result.success
    assert result.message_id.startswith("dryrun-")
    assert mailer.outbox[0].from_email == "Atelier <no-reply@atelier.mx>"
    assert mailer.outbox[0].reply_to == "Atelier <no-reply@atelier.mx>"

    failed = mailer.send(EmailMessage(to="", subject="Hola", html="<p/>"))
    assert not failed.success
    assert len(mailer.outbox) == 1
