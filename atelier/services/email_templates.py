"""HTML email templates for Atelier notifications.

Every interpolated value is HTML-escaped; URLs are escaped as attribute
values.  Copy is in Spanish, matching the dashboard.
"""

from __future__ import annotations

from html import escape
from typing import Iterable

from atelier.settings import settings

ROLE_DESCRIPTIONS = {
    "owner": "propietario con control total",
    "admin": "administrador con acceso completo",
    "editor": "editor con permisos de creación y edición",
    "viewer": "visualizador con acceso de solo lectura",
}

_STYLES = """
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif;
           line-height: 1.6; color: #333; background-color: #f8f9fa; margin: 0; padding: 0; }
    .container { max-width: 600px; margin: 40px auto; background-color: #ffffff;
                 border-radius: 8px; overflow: hidden; box-shadow: 0 2px 4px rgba(0,0,0,0.1); }
    .header { background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white;
              padding: 30px; text-align: center; }
    .header h1 { margin: 0; font-size: 28px; font-weight: 600; }
    .content { padding: 40px 30px; }
    .button { display: inline-block; padding: 12px 30px; background: #667eea; color: white;
              text-decoration: none; border-radius: 5px; font-weight: 500; margin: 20px 0; }
    .footer { background-color: #f8f9fa; padding: 20px; text-align: center; color: #6c757d;
              font-size: 14px; }
    .footer a { color: #667eea; text-decoration: none; }
    code { background-color: #f1f3f5; padding: 2px 6px; border-radius: 3px;
           font-family: 'Courier New', monospace; }
    .alert { background-color: #fff3cd; border-left: 4px solid #ffc107; padding: 15px;
             margin: 20px 0; }
"""


def _button(url: str, label: str) -> str:
    return (
        f'<p style="text-align: center;">'
        f'<a href="{escape(url, quote=True)}" class="button">{escape(label)}</a></p>'
    )


def render_base(content: str) -> str:
    """Wrap already-rendered *content* in the branded layout."""
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Atelier</title>
  <style>{_STYLES}</style>
</head>
<body>
  <div class="container">
    <div class="header"><h1>Atelier</h1></div>
    <div class="content">
{content}
    </div>
    <div class="footer">
      <p>© 2024 Atelier - Gestión Integral para Estudios de Arquitectura</p>
      <p><a href="#">Términos de servicio</a> | <a href="#">Política de privacidad</a> |
         <a href="#">Soporte</a></p>
    </div>
  </div>
</body>
</html>
"""


def render_welcome(name: str, inviter_name: str | None = None, *, app_url: str | None = None) -> str:
    app_url = app_url or settings.APP_URL
    if inviter_name:
        intro = f"<p>{escape(inviter_name)} te ha invitado a unirte a su equipo en Atelier.</p>"
    else:
        intro = "<p>Gracias por registrarte en Atelier.</p>"
    content = f"""
      <h2>¡Bienvenido a Atelier!</h2>
      <p>Hola {escape(name)},</p>
      {intro}
      <p>Atelier es la plataforma integral para la gestión de estudios de arquitectura. Con nosotros podrás:</p>
      <ul>
        <li>Gestionar leads y oportunidades comerciales</li>
        <li>Crear cotizaciones profesionales (CPQ)</li>
        <li>Administrar proyectos con Stage Gate</li>
        <li>Controlar proveedores y finanzas</li>
        <li>Optimizar estrategias con IA</li>
      </ul>
      {_button(f"{app_url}/dashboard", "Ir al Dashboard")}
      <p>Si tienes alguna pregunta, no dudes en contactarnos.</p>
    """
    return render_base(content)


def render_invitation(inviter_name: str, org_name: str, invite_url: str, role: str) -> str:
    role_description = ROLE_DESCRIPTIONS.get(role, role)
    content = f"""
      <h2>Has sido invitado a {escape(org_name)}</h2>
      <p>{escape(inviter_name)} te ha invitado a unirte a <strong>{escape(org_name)}</strong> en Atelier
         como <strong>{escape(role_description)}</strong>.</p>
      <p>Para aceptar la invitación y crear tu cuenta, haz clic en el siguiente botón:</p>
      {_button(invite_url, "Aceptar Invitación")}
      <div class="alert">
        <strong>Nota:</strong> Este enlace de invitación expirará en 7 días. Si no has solicitado
        esta invitación, puedes ignorar este email.
      </div>
    """
    return render_base(content)


def render_password_reset(reset_url: str) -> str:
    content = f"""
      <h2>Restablecer tu contraseña</h2>
      <p>Has solicitado restablecer tu contraseña en Atelier.</p>
      {_button(reset_url, "Restablecer Contraseña")}
      <div class="alert">
        <strong>Importante:</strong> Este enlace expirará en 1 hora. Si no has solicitado este
        cambio, puedes ignorar este email y tu contraseña permanecerá sin cambios.
      </div>
      <p>Si el botón no funciona, copia y pega esta URL en tu navegador:</p>
      <p><code>{escape(reset_url)}</code></p>
    """
    return render_base(content)


def render_quote_ready(client_name: str, project_name: str, quote_url: str, total_amount: str) -> str:
    rows: Iterable[tuple[str, str]] = (
        ("Proyecto:", project_name),
        ("Cliente:", client_name),
        ("Monto Total:", total_amount),
    )
    table = "\n".join(
        f"<tr><td><strong>{escape(label)}</strong></td><td>{escape(value)}</td></tr>"
        for label, value in rows
    )
    content = f"""
      <h2>Cotización Lista para Revisión</h2>
      <p>La cotización para <strong>{escape(client_name)}</strong> está lista para su revisión.</p>
      <table style="width: 100%; margin: 20px 0;">
{table}
      </table>
      {_button(quote_url, "Ver Cotización")}
    """
    return render_base(content)
