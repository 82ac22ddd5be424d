"""pt-BR email templates (Resend-backed).

Every value interpolated into HTML goes through `_esc`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from html import escape

from amor_presente.config import get_settings
from amor_presente.kernel.time import utc_now


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def _esc(value: object) -> str:
    return escape(str(value if value is not None else ""), quote=True)


def _web_link(path: str) -> str | None:
    settings = get_settings()
    if not settings.web_app_url:
        return None
    return settings.web_app_url.rstrip("/") + path


def render_rsvp_email(
    *,
    site_title: str,
    guest_name: str,
    guest_email: str,
    will_attend: bool,
    message: str | None = None,
) -> RenderedEmail:
    title = site_title.strip() if site_title and site_title.strip() else "Lista de Presentes"
    if will_attend:
        subject = f"Confirmação de Presença - {title}"
        banner = """
          <div style="background: #f0f9ff; border: 2px solid #bae6fd; border-radius: 10px; padding: 20px; margin-bottom: 20px; text-align: center;">
            <h2 style="color: #0369a1; margin: 0 0 10px 0;">✅ Presença Confirmada!</h2>
            <p style="color: #0369a1; margin: 0;">Que alegria saber que você estará conosco!</p>
          </div>"""
        status_label = "Confirmado ✅"
        closing = """
          <div style="background: #ecfdf5; border-radius: 10px; padding: 20px; margin-bottom: 20px;">
            <h3 style="color: #065f46; margin: 0 0 15px 0;">🎉 Estamos ansiosos para te ver!</h3>
            <p style="color: #065f46; margin: 0;">Sua presença tornará nosso momento ainda mais especial. Não esqueça de conferir nossa lista de presentes!</p>
          </div>"""
    else:
        subject = f"Resposta Recebida - {title}"
        banner = """
          <div style="background: #fef2f2; border: 2px solid #fecaca; border-radius: 10px; padding: 20px; margin-bottom: 20px; text-align: center;">
            <h2 style="color: #dc2626; margin: 0 0 10px 0;">📝 Resposta Registrada</h2>
            <p style="color: #dc2626; margin: 0;">Obrigado por nos avisar. Sentiremos sua falta!</p>
          </div>"""
        status_label = "Não comparecerá ❌"
        closing = ""

    message_html = ""
    if message:
        message_html = (
            '<p style="margin: 15px 0 5px 0;"><strong>Sua mensagem:</strong></p>'
            '<p style="font-style: italic; color: #6b7280; padding: 10px; background: white; '
            f'border-radius: 5px; margin: 5px 0;">"{_esc(message)}"</p>'
        )

    html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
          <div style="text-align: center; margin-bottom: 30px;">
            <h1 style="color: #D4AF37; margin-bottom: 10px;">💝 {_esc(title)}</h1>
            <div style="width: 60px; height: 2px; background: #D4AF37; margin: 0 auto;"></div>
          </div>
          {banner}
          <div style="background: #f9fafb; border-radius: 10px; padding: 20px; margin-bottom: 20px;">
            <h3 style="color: #374151; margin: 0 0 15px 0;">Detalhes da sua resposta:</h3>
            <p style="margin: 5px 0;"><strong>Nome:</strong> {_esc(guest_name)}</p>
            <p style="margin: 5px 0;"><strong>Email:</strong> {_esc(guest_email)}</p>
            <p style="margin: 5px 0;"><strong>Status:</strong> {status_label}</p>
            {message_html}
          </div>
          {closing}
          <div style="text-align: center; margin-top: 30px; padding-top: 20px; border-top: 1px solid #e5e7eb;">
            <p style="color: #6b7280; font-size: 14px; margin: 0;">
              Email enviado automaticamente pela Lista de Presentes<br>
              Não responda este email
            </p>
          </div>
        </div>
    """.strip()

    text_lines = [
        title,
        "",
        "Presença confirmada!" if will_attend else "Resposta registrada.",
        "",
        f"Nome: {guest_name}",
        f"Email: {guest_email}",
        f"Status: {status_label}",
    ]
    if message:
        text_lines += ["", f'Sua mensagem: "{message}"']
    text_lines += ["", "Email enviado automaticamente pela Lista de Presentes"]

    return RenderedEmail(subject=subject, html=html, text="\n".join(text_lines))


def render_approval_request_email(
    *,
    user_id: str,
    user_name: str | None,
    user_email: str,
    requested_at: datetime | None = None,
) -> RenderedEmail:
    name = user_name.strip() if user_name and user_name.strip() else user_email
    when = (requested_at or utc_now()).strftime("%d/%m/%Y %H:%M:%S")
    link = _web_link("/admin/users")

    subject = f"🔔 Nova Solicitação de Cadastro - {name}"
    link_html = ""
    if link:
        link_html = (
            f'<a href="{_esc(link)}" style="background: #22c55e; color: white; padding: 12px 30px; '
            'text-decoration: none; border-radius: 6px; display: inline-block; margin: 10px; '
            'font-weight: bold;">🔗 Acessar Painel Admin</a>'
        )

    html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; background: #f8f9fa;">
          <div style="background: white; padding: 30px; border-radius: 10px; box-shadow: 0 2px 10px rgba(0,0,0,0.1);">
            <h2 style="color: #333; text-align: center; margin-bottom: 30px;">🔔 Nova Solicitação de Cadastro</h2>
            <div style="background: #f8f9fa; padding: 20px; border-radius: 8px; margin-bottom: 20px;">
              <p style="margin: 0 0 10px 0;"><strong>Nome:</strong> {_esc(name)}</p>
              <p style="margin: 0 0 10px 0;"><strong>Email:</strong> {_esc(user_email)}</p>
              <p style="margin: 0 0 10px 0;"><strong>Data:</strong> {when}</p>
              <p style="margin: 0;"><strong>ID do Usuário:</strong> {_esc(user_id)}</p>
            </div>
            <div style="text-align: center; margin: 30px 0;">
              <p style="color: #666; margin-bottom: 20px;">
                Este usuário precisa da sua aprovação para criar sites na plataforma.
              </p>
              {link_html}
            </div>
          </div>
        </div>
    """.strip()

    text_lines = [
        "Nova solicitação de cadastro",
        "",
        f"Nome: {name}",
        f"Email: {user_email}",
        f"Data: {when}",
        f"ID do Usuário: {user_id}",
        "",
        "Este usuário precisa da sua aprovação para criar sites na plataforma.",
    ]
    if link:
        text_lines += ["", f"Painel admin: {link}"]

    return RenderedEmail(subject=subject, html=html, text="\n".join(text_lines))


def render_approval_result_email(
    *,
    user_name: str | None,
    approved: bool,
) -> RenderedEmail:
    name = user_name.strip() if user_name and user_name.strip() else "usuário"
    if approved:
        subject = "✅ Seu cadastro foi aprovado!"
        message = (
            "Parabéns! Seu cadastro foi aprovado. "
            "Agora você pode criar seus sites de lista de presentes."
        )
        link = _web_link("/dashboard")
    else:
        subject = "❌ Cadastro não aprovado"
        message = (
            "Infelizmente seu cadastro não foi aprovado desta vez. "
            "Entre em contato conosco se tiver dúvidas."
        )
        link = None

    color = "#22c55e" if approved else "#ef4444"
    link_html = ""
    if link:
        link_html = f"""
            <div style="text-align: center; margin: 30px 0;">
              <a href="{_esc(link)}" style="background: #22c55e; color: white; padding: 12px 30px; text-decoration: none; border-radius: 6px; display: inline-block; font-weight: bold;">🚀 Acessar Plataforma</a>
            </div>"""

    html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; background: #f8f9fa;">
          <div style="background: white; padding: 30px; border-radius: 10px; box-shadow: 0 2px 10px rgba(0,0,0,0.1);">
            <h2 style="color: {color}; text-align: center; margin-bottom: 30px;">{subject}</h2>
            <p style="color: #333; font-size: 16px; line-height: 1.6;">Olá {_esc(name)},</p>
            <p style="color: #333; font-size: 16px; line-height: 1.6;">{message}</p>
            {link_html}
            <div style="margin-top: 30px; padding-top: 20px; border-top: 1px solid #e5e5e5;">
              <p style="color: #666; font-size: 14px; margin: 0;">
                Atenciosamente,<br>
                Equipe Lista de Presentes
              </p>
            </div>
          </div>
        </div>
    """.strip()

    text_lines = [f"Olá {name},", "", message]
    if link:
        text_lines += ["", f"Acessar plataforma: {link}"]
    text_lines += ["", "Atenciosamente,", "Equipe Lista de Presentes"]

    return RenderedEmail(subject=subject, html=html, text="\n".join(text_lines))
