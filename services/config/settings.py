from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple
import copy

from services.complexity.scorer import LEVELS
from services.costing.numeric import InvalidInput, round_money, to_number

MONTHLY_HOURS_BASE = 168.0
LEVEL_KEYS: Tuple[str, ...] = tuple(level.key for level in LEVELS)

# Per-field defaults applied when a value is missing (or zero, for the
# strategic rates and percentages).
DEFAULT_GENAI_COST_PER_TRANSACTION = 0.05
DEFAULT_IDP_LICENSE_ANNUAL = 5000.0
DEFAULT_TURNOVER_REPLACEMENT_PCT = 20.0
DEFAULT_ROI_ACCURACY_PCT = 100.0
DEFAULT_FTE_MONTHLY_COST = 8000.0
DEFAULT_CAPACITY_LOW = 90.0
DEFAULT_CAPACITY_MEDIUM = 70.0
DEFAULT_CAPACITY_HIGH = 50.0

# First-run document used while nothing has been saved yet.
FALLBACK_DOCUMENT: Dict[str, Any] = {
    "team_composition": [
        {
            "role": "Default Developer",
            "rate": 120.0,
            "shares": {
                "very_simple": 0.1,
                "simple": 0.2,
                "medium": 0.5,
                "complex": 1.0,
                "very_complex": 2.0,
            },
        }
    ],
    "infra_costs": {
        "rpa_license_annual": 15000.0,
        "virtual_machine_annual": 5000.0,
        "database_annual": 0.0,
    },
    "strategic_config": {
        "genai_cost_per_transaction": DEFAULT_GENAI_COST_PER_TRANSACTION,
        "idp_license_annual": DEFAULT_IDP_LICENSE_ANNUAL,
        "turnover_replacement_cost_percentage": DEFAULT_TURNOVER_REPLACEMENT_PCT,
        "roi_accuracy_percentage": DEFAULT_ROI_ACCURACY_PCT,
    },
    "maintenance_config": {
        "fte_monthly_cost": DEFAULT_FTE_MONTHLY_COST,
        "capacity_low": DEFAULT_CAPACITY_LOW,
        "capacity_medium": DEFAULT_CAPACITY_MEDIUM,
        "capacity_high": DEFAULT_CAPACITY_HIGH,
    },
}

DEFAULT_ANNUAL_COST_ESTIMATE: Dict[str, float] = {
    "baseAnnualCost": 70000.0,
    "robots24h": 33,
    "robots12h": 18,
    "markupMargin": 100.0,
    "growthPerMonth": 15,
}


@dataclass(frozen=True)
class TeamMember:
    role: str
    hourly_rate: float
    shares_by_complexity: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class InfraCosts:
    rpa_license_annual: float = 0.0
    virtual_machine_annual: float = 0.0
    database_annual: float = 0.0


@dataclass(frozen=True)
class StrategicConfig:
    genai_cost_per_transaction: float = DEFAULT_GENAI_COST_PER_TRANSACTION
    idp_license_annual: float = DEFAULT_IDP_LICENSE_ANNUAL
    turnover_replacement_cost_percentage: float = DEFAULT_TURNOVER_REPLACEMENT_PCT
    roi_accuracy_percentage: float = DEFAULT_ROI_ACCURACY_PCT


@dataclass(frozen=True)
class MaintenanceConfig:
    fte_monthly_cost: float = 0.0
    capacity_low: float = DEFAULT_CAPACITY_LOW
    capacity_medium: float = DEFAULT_CAPACITY_MEDIUM
    capacity_high: float = DEFAULT_CAPACITY_HIGH


@dataclass(frozen=True)
class GlobalConfiguration:
    team_composition: Tuple[TeamMember, ...]
    infra_costs: InfraCosts
    strategic_config: StrategicConfig
    maintenance_config: MaintenanceConfig
    # derived hours per level; informational only
    baselines: Mapping[str, float] = field(default_factory=dict)


def normalize_member(raw: Mapping[str, Any]) -> TeamMember:
    """Normalize a stored team member.

    Older documents carry a single ``share`` applied to every level; newer
    ones a ``shares`` map keyed by level. Both end up as a full per-level map.
    """
    shares = raw.get("shares")
    if isinstance(shares, Mapping):
        by_level = {k: to_number(shares.get(k)) for k in LEVEL_KEYS}
    else:
        flat = to_number(raw.get("share"))
        by_level = {k: flat for k in LEVEL_KEYS}
    rate = raw.get("rate", raw.get("hourly_rate"))
    return TeamMember(role=str(raw.get("role") or ""), hourly_rate=to_number(rate), shares_by_complexity=by_level)


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    sec = raw.get(name)
    if isinstance(sec, Mapping):
        return sec
    return FALLBACK_DOCUMENT[name]


def parse_configuration(raw: Mapping[str, Any] | None) -> GlobalConfiguration:
    """Turn a stored settings document into a GlobalConfiguration.

    ``None`` means nothing has been saved yet and yields the fallback
    configuration. Parsing never raises; missing values degrade to defaults.
    """
    if raw is None or not isinstance(raw, Mapping):
        raw = FALLBACK_DOCUMENT

    team_raw = raw.get("team_composition")
    if not isinstance(team_raw, (list, tuple)):
        # missing or unusable (a number, a map, ...): same as never saved
        team_raw = FALLBACK_DOCUMENT["team_composition"]
    team = tuple(normalize_member(m) for m in team_raw if isinstance(m, Mapping))

    infra = _section(raw, "infra_costs")
    strategic = _section(raw, "strategic_config")
    maint = _section(raw, "maintenance_config")

    def cap(key: str, default: float) -> float:
        return to_number(maint.get(key), default) if maint.get(key) is not None else default

    return GlobalConfiguration(
        team_composition=team,
        infra_costs=InfraCosts(
            rpa_license_annual=to_number(infra.get("rpa_license_annual")),
            virtual_machine_annual=to_number(infra.get("virtual_machine_annual")),
            database_annual=to_number(infra.get("database_annual")),
        ),
        strategic_config=StrategicConfig(
            genai_cost_per_transaction=to_number(strategic.get("genai_cost_per_transaction")) or DEFAULT_GENAI_COST_PER_TRANSACTION,
            idp_license_annual=to_number(strategic.get("idp_license_annual")) or DEFAULT_IDP_LICENSE_ANNUAL,
            turnover_replacement_cost_percentage=to_number(strategic.get("turnover_replacement_cost_percentage")) or DEFAULT_TURNOVER_REPLACEMENT_PCT,
            roi_accuracy_percentage=to_number(strategic.get("roi_accuracy_percentage")) or DEFAULT_ROI_ACCURACY_PCT,
        ),
        maintenance_config=MaintenanceConfig(
            fte_monthly_cost=to_number(maint.get("fte_monthly_cost")),
            capacity_low=cap("capacity_low", DEFAULT_CAPACITY_LOW),
            capacity_medium=cap("capacity_medium", DEFAULT_CAPACITY_MEDIUM),
            capacity_high=cap("capacity_high", DEFAULT_CAPACITY_HIGH),
        ),
        baselines={k: v["hours"] for k, v in derive_baselines(team).items()},
    )


def fallback_configuration() -> GlobalConfiguration:
    return parse_configuration(None)


def derive_baselines(team: Tuple[TeamMember, ...] | List[TeamMember]) -> Dict[str, Dict[str, float]]:
    """Hours and cost per complexity level for a squad (share * 168h * rate)."""
    out: Dict[str, Dict[str, float]] = {}
    for key in LEVEL_KEYS:
        hours = 0.0
        cost = 0.0
        for m in team:
            h = to_number(m.shares_by_complexity.get(key)) * MONTHLY_HOURS_BASE
            hours += h
            cost += h * m.hourly_rate
        out[key] = {"hours": round_money(hours), "cost": round_money(cost)}
    return out


def sanitize_settings(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Clean a settings write payload before it is stored.

    Only the sections present in the payload are returned so a partial save
    (e.g. just ``annual_cost_estimate``) merges without touching the rest.
    """
    out: Dict[str, Any] = {}
    if "team_composition" in raw:
        members_raw = raw.get("team_composition")
        if members_raw is None:
            members_raw = []
        elif not isinstance(members_raw, (list, tuple)):
            raise InvalidInput("team_composition must be a list")
        team = []
        for m in members_raw:
            if not isinstance(m, Mapping):
                continue
            member = normalize_member(m)
            team.append({
                "role": member.role or "New Role",
                "rate": max(0.0, member.hourly_rate),
                "shares": {k: max(0.0, v) for k, v in member.shares_by_complexity.items()},
            })
        out["team_composition"] = team
        members = [normalize_member(m) for m in team]
        out["baselines"] = {k: v["hours"] for k, v in derive_baselines(members).items()}
    if isinstance(raw.get("infra_costs"), Mapping):
        infra = raw["infra_costs"]
        out["infra_costs"] = {
            k: max(0.0, to_number(infra.get(k)))
            for k in ("rpa_license_annual", "virtual_machine_annual", "database_annual")
        }
    if isinstance(raw.get("maintenance_config"), Mapping):
        mc = raw["maintenance_config"]
        out["maintenance_config"] = {
            "fte_monthly_cost": to_number(mc.get("fte_monthly_cost")) or DEFAULT_FTE_MONTHLY_COST,
            "capacity_low": to_number(mc.get("capacity_low")) or DEFAULT_CAPACITY_LOW,
            "capacity_medium": to_number(mc.get("capacity_medium")) or DEFAULT_CAPACITY_MEDIUM,
            "capacity_high": to_number(mc.get("capacity_high")) or DEFAULT_CAPACITY_HIGH,
        }
    if isinstance(raw.get("strategic_config"), Mapping):
        sc = raw["strategic_config"]
        out["strategic_config"] = {
            "genai_cost_per_transaction": to_number(sc.get("genai_cost_per_transaction")) or DEFAULT_GENAI_COST_PER_TRANSACTION,
            "idp_license_annual": to_number(sc.get("idp_license_annual")) or DEFAULT_IDP_LICENSE_ANNUAL,
            "turnover_replacement_cost_percentage": to_number(sc.get("turnover_replacement_cost_percentage")) or DEFAULT_TURNOVER_REPLACEMENT_PCT,
            "roi_accuracy_percentage": to_number(sc.get("roi_accuracy_percentage")) or DEFAULT_ROI_ACCURACY_PCT,
        }
    if isinstance(raw.get("annual_cost_estimate"), Mapping):
        est = raw["annual_cost_estimate"]
        out["annual_cost_estimate"] = {
            k: to_number(est.get(k), default) if est.get(k) is not None else default
            for k, default in DEFAULT_ANNUAL_COST_ESTIMATE.items()
        }
    return out


def default_settings_view() -> Dict[str, Any]:
    """Settings shown before the first save: empty squad, zeroed infra."""
    return {
        "team_composition": [],
        "infra_costs": {"rpa_license_annual": 0.0, "virtual_machine_annual": 0.0, "database_annual": 0.0},
        "annual_cost_estimate": copy.deepcopy(DEFAULT_ANNUAL_COST_ESTIMATE),
        "maintenance_config": copy.deepcopy(FALLBACK_DOCUMENT["maintenance_config"]),
        "strategic_config": copy.deepcopy(FALLBACK_DOCUMENT["strategic_config"]),
        "baselines": {k: 0.0 for k in LEVEL_KEYS},
    }
