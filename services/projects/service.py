from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional
import logging
import time

from services.complexity.scorer import ComplexityInput
from services.costing.inputs import InvalidInput, OperationalInput, StrategicInput
from services.roi.engine import ROIEngine
from services.roi.result import ROIResult
from services.storage.documents import DocumentStore

logger = logging.getLogger(__name__)

PROJECTS_COLLECTION = "projects"
RECALC_KEYS = ("inputs", "complexity", "strategic")


class ProjectNotFound(KeyError):
    pass


def _now() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


def parse_payload(payload: Mapping[str, Any]):
    """(operational, complexity, strategic) from an API payload."""
    return (
        OperationalInput.from_dict(payload.get("inputs")),
        ComplexityInput.from_dict(payload.get("complexity")),
        StrategicInput.from_dict(payload.get("strategic")),
    )


def result_fields(op: OperationalInput, cx: ComplexityInput, st: StrategicInput, result: ROIResult) -> Dict[str, Any]:
    """Stored snapshot of a calculation."""
    r = result.to_dict()
    return {
        "inputs_as_is": {
            "volume": op.volume,
            "aht": op.aht,
            "fte_cost": op.fte_cost,
            "error_rate": op.error_rate,
        },
        "complexity_input": cx.to_dict(),
        "strategic_input": st.to_dict(),
        "complexity_score": {
            "total_points": result.complexity.score,
            "classification": result.complexity.classification.value,
            "hours": r["complexity"]["hours"],
        },
        "strategic_analysis": r["strategic"],
        "maintenance_analysis": r["maintenance"],
        "results": {
            "development_cost": result.development_cost,
            "development_hours": result.development_hours,
            "as_is_cost_annual": result.as_is.annual,
            "to_be_cost_annual": result.to_be.annual,
            "roi_year_1": result.roi.roi_year1,
            "roi_year_3": result.roi.roi_year3,
            "annual_savings": result.roi.annual_savings,
            "gross_annual_savings": result.roi.gross_annual_savings,
            "monthly_savings": result.roi.monthly_savings,
            "payback_months": result.roi.payback_months,
            "cost_breakdown": r["costs"]["toBe"],
        },
    }


class ProjectService:
    """Simulations: calculate, persist and manage project records."""

    def __init__(self, store: DocumentStore, engine: ROIEngine):
        self.store = store
        self.engine = engine

    def _calculate(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        op, cx, st = parse_payload(payload)
        result = self.engine.calculate_full_roi(op, cx, st)
        return result_fields(op, cx, st, result)

    def create_project(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        name = str(payload.get("projectName") or "").strip()
        if not name:
            raise InvalidInput("projectName is required")
        now = _now()
        project = {
            "project_name": name,
            "owner_uid": payload.get("ownerUid") or "anonymous",
            "responsible_name": payload.get("responsibleName") or "Not informed",
            "created_at": now,
            "updated_at": now,
            **self._calculate(payload),
        }
        pid = self.store.add(PROJECTS_COLLECTION, project)
        logger.info("Project created: id=%s name=%s owner=%s", pid, name, project["owner_uid"])
        return {"id": pid, **project}

    def get_project(self, project_id: str) -> Dict[str, Any]:
        try:
            doc = self.store.get(PROJECTS_COLLECTION, project_id)
        except KeyError:
            doc = None
        if doc is None:
            raise ProjectNotFound(project_id)
        return {"id": project_id, **doc}

    def list_projects(self, owner_uid: Optional[str] = None, limit: int = 50) -> List[Dict[str, Any]]:
        docs = self.store.list(PROJECTS_COLLECTION)
        if owner_uid and owner_uid != "all":
            docs = [d for d in docs if d.get("owner_uid") == owner_uid]
        docs.sort(key=lambda d: d.get("created_at") or "", reverse=True)
        return docs[:max(0, limit)]

    def update_project(self, project_id: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        """Merge updates into a project; changed inputs trigger a recalculation."""
        current = self.get_project(project_id)
        data: Dict[str, Any] = {}
        if "projectName" in updates:
            name = str(updates.get("projectName") or "").strip()
            if not name:
                raise InvalidInput("projectName must not be empty")
            data["project_name"] = name
        if "responsibleName" in updates:
            data["responsible_name"] = updates.get("responsibleName") or "Not informed"
        if any(k in updates for k in RECALC_KEYS):
            merged = {
                "inputs": updates.get("inputs", _stored_inputs(current)),
                "complexity": updates.get("complexity", current.get("complexity_input")),
                "strategic": updates.get("strategic", current.get("strategic_input")),
            }
            data.update(self._calculate(merged))
        data["updated_at"] = _now()
        try:
            doc = self.store.update(PROJECTS_COLLECTION, project_id, data)
        except KeyError:
            raise ProjectNotFound(project_id)
        logger.info("Project updated: id=%s fields=%s", project_id, sorted(data.keys()))
        return {"id": project_id, **doc}

    def delete_project(self, project_id: str) -> None:
        try:
            deleted = self.store.delete(PROJECTS_COLLECTION, project_id)
        except KeyError:
            deleted = False
        if not deleted:
            raise ProjectNotFound(project_id)
        logger.info("Project deleted: id=%s", project_id)


def _stored_inputs(project: Mapping[str, Any]) -> Dict[str, Any]:
    i = project.get("inputs_as_is") or {}
    return {"volume": i.get("volume"), "aht": i.get("aht"), "fteCost": i.get("fte_cost"), "errorRate": i.get("error_rate")}
