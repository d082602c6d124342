from typing import Any, Dict, List

from .llm import chat_json
from ..core.utils import clamp, to_number
from ..data.base import LegalCheckOptions, LegalCheckResult, OwnershipStatus, PropertyRecord

SYSTEM_PROMPT = (
    "You are an expert Indonesian property lawyer with deep knowledge of land registration "
    "systems, zoning laws, and property regulations in Jakarta and across Indonesia."
)

FALLBACK_NOTES = "Legal check generated using fallback methodology due to AI service limitations"


def fallback_legal_check(property: PropertyRecord) -> LegalCheckResult:
    """Document-presence check. Zoning and land use are assumed compliant."""
    certified = property.ownership_status == OwnershipStatus.CERTIFIED
    has_certificate = bool(property.certificate_number)

    flags = []
    if not certified:
        flags.append("Ownership not certified")
    if not has_certificate:
        flags.append("Certificate number missing")
    if not property.zoning:
        flags.append("Zoning information not provided")

    return LegalCheckResult(
        ownership_verified=certified,
        certificate_valid=has_certificate,
        zoning_compliant=True,
        land_use_permitted=True,
        compliance_score=0.8 if certified and has_certificate else 0.5,
        risk_flags=flags,
        notes=FALLBACK_NOTES,
    )


def build_legal_prompt(property: PropertyRecord, options: LegalCheckOptions) -> str:
    return f"""You are an expert in Indonesian property law and land registration systems, including Jakarta Satu and Sentuh Tanahku.

Please analyze the following property data and provide a comprehensive legal verification:

Property Details:
- Address: {property.address}
- District: {property.district}
- City: {property.city}
- Province: {property.province}
- Ownership Status: {property.ownership_status.value}
- Certificate Number: {property.certificate_number or 'Not provided'}
- Zoning: {property.zoning or 'Not specified'}
- Land Use: {property.land_use or 'Not specified'}
- Asset Type: {property.asset_type.value}

Analysis Options:
- Include Jakarta Satu data: {'Yes' if options.include_jakarta_satu else 'No'}
- Include Sentuh Tanahku data: {'Yes' if options.include_sentuh_tanahku else 'No'}

Respond ONLY with a JSON object with the following structure:
{{
  "ownershipVerified": boolean,
  "certificateValid": boolean,
  "zoningCompliant": boolean,
  "landUsePermitted": boolean,
  "encumbrances": [{{"type": "string", "description": "string", "severity": "LOW|MEDIUM|HIGH"}}],
  "disputes": [{{"type": "string", "description": "string", "status": "ACTIVE|RESOLVED"}}],
  "restrictions": [{{"type": "string", "description": "string", "impact": "LOW|MEDIUM|HIGH"}}],
  "complianceScore": number,
  "riskFlags": ["string"],
  "notes": "string"
}}"""


def _records(value: Any) -> List[Dict[str, Any]]:
    return [v for v in value if isinstance(v, dict)] if isinstance(value, list) else []


def clean_legal_payload(data: Dict[str, Any]) -> LegalCheckResult:
    flags = data.get("riskFlags")
    return LegalCheckResult(
        ownership_verified=bool(data.get("ownershipVerified")),
        certificate_valid=bool(data.get("certificateValid")),
        zoning_compliant=bool(data.get("zoningCompliant")),
        land_use_permitted=bool(data.get("landUsePermitted")),
        compliance_score=clamp(to_number(data.get("complianceScore"), 0.5)),
        encumbrances=_records(data.get("encumbrances")),
        disputes=_records(data.get("disputes")),
        restrictions=_records(data.get("restrictions")),
        risk_flags=[str(f) for f in flags] if isinstance(flags, list) else [],
        notes=str(data["notes"]) if data.get("notes") else None,
    )


class OpenAILegalModel:
    def __init__(self, client: Any, model: str):
        self.client = client
        self.model = model

    def check(self, property: PropertyRecord, options: LegalCheckOptions) -> LegalCheckResult:
        data = chat_json(
            self.client, self.model, SYSTEM_PROMPT, build_legal_prompt(property, options),
            temperature=0.2, max_tokens=1500,
        )
        return clean_legal_payload(data)
