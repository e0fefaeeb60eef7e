"""
Resource catalogue helpers.
Turns dataset-listing payloads (data.gov.sg v2 and legacy CKAN) into the
organisation and dataset menus.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.errors import InvalidInputError


CSV_FORMAT = "CSV"
UNKNOWN_ORGANISATION = "Unknown"


@dataclass(frozen=True)
class Resource:
    """One chartable dataset resource."""
    resource_id: str
    resource_name: str
    organisation: str
    resource_format: str = CSV_FORMAT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource_id": self.resource_id,
            "resource_name": self.resource_name,
            "organisation": self.organisation,
            "resource_format": self.resource_format,
        }


def _is_csv(item: Mapping[str, Any]) -> bool:
    return str(item.get("format") or "").upper() == CSV_FORMAT


def _from_v2(datasets: Sequence[Mapping[str, Any]]) -> List[Resource]:
    return [
        Resource(
            resource_id=str(dataset.get("datasetId")),
            resource_name=str(dataset.get("name") or ""),
            organisation=dataset.get("managedByAgencyName") or UNKNOWN_ORGANISATION,
        )
        for dataset in datasets
        if isinstance(dataset, Mapping) and _is_csv(dataset) and dataset.get("datasetId")
    ]


def _from_ckan(packages: Sequence[Mapping[str, Any]]) -> List[Resource]:
    resources = []
    for package in packages:
        if not isinstance(package, Mapping):
            continue
        organization = package.get("organization") or {}
        organisation = organization.get("title") or organization.get("name") or UNKNOWN_ORGANISATION
        for resource in package.get("resources") or []:
            if not isinstance(resource, Mapping) or not _is_csv(resource) or not resource.get("id"):
                continue
            resources.append(Resource(
                resource_id=str(resource["id"]),
                resource_name=str(resource.get("name") or package.get("title") or ""),
                organisation=organisation,
            ))
    return resources


def extract_resources(payload: Any) -> List[Resource]:
    """
    Extract CSV resources from one or more dataset-listing pages.

    Args:
        payload: A v2 listing page `{"code": 0, "data": {"datasets": [...]}}`,
            a CKAN package search `{"success": true, "result": {"results": [...]}}`,
            or a list of such pages

    Returns:
        CSV resources in listing order

    Raises:
        InvalidInputError: If a page has neither shape
    """
    if isinstance(payload, list):
        resources = []
        for page in payload:
            resources.extend(extract_resources(page))
        return resources

    if not isinstance(payload, Mapping):
        raise InvalidInputError("Listing payload must be an object or a list of pages")

    data = payload.get("data")
    if payload.get("code") == 0 and isinstance(data, Mapping) and isinstance(data.get("datasets"), list):
        return _from_v2(data["datasets"])

    result = payload.get("result")
    if payload.get("success") and isinstance(result, Mapping) and isinstance(result.get("results"), list):
        return _from_ckan(result["results"])

    raise InvalidInputError("Unknown dataset listing format")


def list_organisations(resources: Sequence[Resource]) -> List[str]:
    """Sorted unique organisation names."""
    return sorted({resource.organisation for resource in resources})


def filter_resource_ids(resources: Sequence[Resource], organisation: str) -> List[str]:
    """Unique resource ids owned by an organisation, in listing order."""
    seen = {}
    for resource in resources:
        if resource.organisation == organisation:
            seen.setdefault(resource.resource_id, None)
    return list(seen)


def get_resource_name(resources: Sequence[Resource], resource_id: str) -> str:
    """Display name of a resource, or "" if it is not listed."""
    resource = find_resource(resources, resource_id)
    return resource.resource_name if resource else ''


def find_resource(resources: Sequence[Resource], resource_id: str) -> Optional[Resource]:
    for resource in resources:
        if resource.resource_id == resource_id:
            return resource
    return None
