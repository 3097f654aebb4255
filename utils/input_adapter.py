# utils/input_adapter.py
"""
Conversion between externally stored scenarios and the typed RetirementScenario.

Stored scenarios use camelCase keys and keep each parameter group as its own
JSON string keyed by scenario id. Everything past this module only sees the
typed dataclasses.
"""
import json
import logging
import re
from dataclasses import asdict, fields
from typing import Any, Dict, Mapping, Optional, Union

from config.scenario_defaults import (
    cola_defaults,
    financial_defaults,
    pension_defaults,
    personal_defaults,
    social_security_defaults,
    tax_defaults,
)
from models import (
    ColaParameters,
    FinancialParameters,
    PensionParameters,
    PersonalParameters,
    RetirementScenario,
    ServicePurchase,
    SocialSecurityParameters,
    TaxParameters,
)
from utils.currency import clean_currency, clean_rate

logger = logging.getLogger(__name__)

# External group key -> (scenario attribute, dataclass, defaults)
PARAMETER_GROUPS = {
    "personalParameters": ("personal", PersonalParameters, personal_defaults),
    "pensionParameters": ("pension", PensionParameters, pension_defaults),
    "socialSecurityParameters": ("social_security", SocialSecurityParameters, social_security_defaults),
    "financialParameters": ("financial", FinancialParameters, financial_defaults),
    "taxParameters": ("tax", TaxParameters, tax_defaults),
    "colaParameters": ("cola", ColaParameters, cola_defaults),
}

# camelCase spellings the generic conversion gets wrong
_CAMEL_ALIASES = {
    "traditional401kBalance": "traditional_401k_balance",
}
_SNAKE_ALIASES = {
    "traditional_401k_balance": "traditional401kBalance",
    "roth_ira_balance": "rothIRABalance",
    "traditional_ira_balance": "traditionalIRABalance",
    "pension_cola": "pensionCOLA",
    "social_security_cola": "socialSecurityCOLA",
}

CURRENCY_FIELDS = {
    "average_salary", "full_retirement_benefit", "early_retirement_benefit",
    "delayed_retirement_benefit", "spouse_full_retirement_benefit",
    "other_retirement_income", "roth_ira_balance", "traditional_401k_balance",
    "traditional_ira_balance", "savings_account_balance", "estimated_medicare_premiums",
}
RATE_FIELDS = {
    "expected_return_rate", "inflation_rate", "withdrawal_rate",
    "healthcare_cost_inflation", "pension_cola", "social_security_cola",
}


def camel_to_snake(name: str) -> str:
    if name in _CAMEL_ALIASES:
        return _CAMEL_ALIASES[name]
    if "_" in name:
        return name.lower()
    name = re.sub(r"(?<=[A-Z])(?=[A-Z][a-z])", "_", name)
    name = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", name)
    return name.lower()


def snake_to_camel(name: str) -> str:
    if name in _SNAKE_ALIASES:
        return _SNAKE_ALIASES[name]
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _parse_group_number(value: Any) -> int:
    """Accepts 1, '1' or 'GROUP_1'."""
    text = str(value).strip().upper().replace("GROUP_", "").replace("GROUP", "")
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"Unknown retirement group '{value}'")


def _clean_value(key: str, value: Any) -> Any:
    if value is None:
        return None
    if key in CURRENCY_FIELDS:
        return clean_currency(value)
    if key in RATE_FIELDS:
        return clean_rate(value)
    if key == "retirement_group":
        return _parse_group_number(value)
    if key == "service_purchases":
        return tuple(_service_purchase(p) for p in value)
    if key == "salary_history":
        return tuple(clean_currency(s) for s in value)
    return value


def _service_purchase(raw: Union[Mapping, ServicePurchase]) -> ServicePurchase:
    if isinstance(raw, ServicePurchase):
        return raw
    data = {camel_to_snake(k): v for k, v in raw.items()}
    return ServicePurchase(
        type=data.get("type", "other"),
        years=float(data.get("years", 0)),
        cost=clean_currency(data.get("cost", 0)),
        is_paid=bool(data.get("is_paid", False)),
    )


def build_parameter_group(cls, raw: Optional[Mapping], defaults: Optional[Mapping] = None):
    """
    Builds one parameter dataclass from defaults overlaid with `raw`,
    keeping only keys that are fields of `cls` (unknown keys are logged and dropped).
    """
    inputs_dict = dict(defaults or {})
    for key, value in (raw or {}).items():
        inputs_dict[camel_to_snake(key)] = value

    field_names = {f.name for f in fields(cls)}
    unknown = set(inputs_dict) - field_names
    if unknown:
        logger.debug(f"{cls.__name__}: ignoring unknown fields {sorted(unknown)}")

    final_inputs = {
        key: _clean_value(key, value)
        for key, value in inputs_dict.items()
        if key in field_names
    }
    try:
        return cls(**final_inputs)
    except TypeError as e:
        # Missing required field
        raise ValueError(f"{cls.__name__}: {e}") from e


def _decode_group(blob: Union[str, bytes, Mapping, None]) -> Optional[Mapping]:
    if blob is None or isinstance(blob, Mapping):
        return blob
    try:
        return json.loads(blob)
    except json.JSONDecodeError as e:
        raise ValueError(f"Malformed parameter group JSON: {e}") from e


def scenario_from_dict(data: Mapping[str, Any], use_defaults: bool = True) -> RetirementScenario:
    """
    Builds a RetirementScenario from a camelCase mapping whose parameter
    groups are either nested mappings or JSON strings.
    """
    if "id" not in data:
        raise ValueError("Scenario is missing 'id'")

    groups = {}
    for external_key, (attr, cls, defaults) in PARAMETER_GROUPS.items():
        raw = _decode_group(data.get(external_key, data.get(attr)))
        groups[attr] = build_parameter_group(cls, raw, defaults if use_defaults else None)

    return RetirementScenario(
        id=str(data["id"]),
        name=data.get("name", ""),
        description=data.get("description") or "",
        is_baseline=bool(data.get("isBaseline", data.get("is_baseline", False))),
        **groups,
    )


def scenario_from_records(scenario_id: str, blobs: Mapping[str, Any], **metadata: Any) -> RetirementScenario:
    """Builds a scenario from per-group stored blobs (e.g. one JSON column per group)."""
    data = dict(metadata)
    data.update(blobs)
    data["id"] = scenario_id
    return scenario_from_dict(data)


def _group_to_camel(group) -> Dict[str, Any]:
    out = {}
    for key, value in asdict(group).items():
        if key == "service_purchases":
            value = [{snake_to_camel(k): v for k, v in p.items()} for p in value]
        elif isinstance(value, tuple):
            value = list(value)
        out[snake_to_camel(key)] = value
    return out


def scenario_to_records(scenario: RetirementScenario) -> Dict[str, str]:
    """Inverse of scenario_from_records: one camelCase JSON string per parameter group."""
    return {
        external_key: json.dumps(_group_to_camel(getattr(scenario, attr)))
        for external_key, (attr, _, _) in PARAMETER_GROUPS.items()
    }


def scenario_to_dict(scenario: RetirementScenario) -> Dict[str, Any]:
    data = {
        "id": scenario.id,
        "name": scenario.name,
        "description": scenario.description,
        "isBaseline": scenario.is_baseline,
    }
    for external_key, (attr, _, _) in PARAMETER_GROUPS.items():
        data[external_key] = _group_to_camel(getattr(scenario, attr))
    return data
