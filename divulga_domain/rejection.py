from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import RejectionReason

DEFAULT_ORGANIZATION_ID = "default"

DEFAULT_REJECTION_REASONS: tuple[RejectionReason, ...] = (
    RejectionReason(id="default-1", organization_id=DEFAULT_ORGANIZATION_ID, text="Perfil inadequado para a vaga."),
    RejectionReason(
        id="default-2", organization_id=DEFAULT_ORGANIZATION_ID, text="Fotos de baixa qualidade ou inadequadas."
    ),
    RejectionReason(id="default-3", organization_id=DEFAULT_ORGANIZATION_ID, text="Informações de contato inválidas."),
    RejectionReason(id="default-4", organization_id=DEFAULT_ORGANIZATION_ID, text="Não cumpre os pré-requisitos da vaga."),
    RejectionReason(
        id="default-5",
        organization_id=DEFAULT_ORGANIZATION_ID,
        text="Vagas preenchidas no momento, tente novamente no futuro.",
    ),
)

DEFAULT_REJECTION_MESSAGE = (
    "Agradecemos o seu interesse, mas no momento as vagas da equipe foram preenchidas "
    "e seu perfil não foi selecionado."
)

VIP_OFFER_TEMPLATE = (
    "\n\n🎁 OPORTUNIDADE ESPECIAL: Notamos seu grande interesse em estar conosco e, como agradecimento, "
    "liberamos um acesso promocional exclusivo para o nosso CLUBE VIP com valor diferenciado. "
    "Não fique de fora da festa! Reserve agora: {url}"
)


def _reason_key(text: str) -> str:
    return text.strip().lower()


def combine_rejection_reasons(
    tenant_reasons: Iterable[RejectionReason],
    defaults: Sequence[RejectionReason] = DEFAULT_REJECTION_REASONS,
) -> list[RejectionReason]:
    combined: dict[str, RejectionReason] = {}
    for reason in tenant_reasons:
        key = _reason_key(reason.text)
        if key and key not in combined:
            combined[key] = reason
    for reason in defaults:
        combined.setdefault(_reason_key(reason.text), reason)
    return list(combined.values())


def compose_rejection_message(
    selected: Iterable[str],
    custom: str = "",
    vip_offer_url: str | None = None,
) -> str:
    parts = [text for text in selected if text.strip()]
    if custom.strip():
        parts.append(custom.strip())
    message = "- " + "\n- ".join(parts) if parts else DEFAULT_REJECTION_MESSAGE
    if vip_offer_url:
        message += VIP_OFFER_TEMPLATE.format(url=vip_offer_url)
    return message
