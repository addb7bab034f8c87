"""
'batch/coordinates.py': Locate the NLU domain/version pair in a flow configuration.

Flow configurations come in several shapes. Each strategy below handles one of
them and returns None when it does not apply; they are tried in order and the
first hit wins.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple

Coordinates = Tuple[str, str]
Strategy = Callable[[Dict[str, Any]], Optional[Coordinates]]


def _pair(domain_id: Any, version_id: Any) -> Optional[Coordinates]:
    if domain_id and version_id and not isinstance(domain_id, (dict, list)) and not isinstance(version_id, (dict, list)):
        return str(domain_id), str(version_id)
    return None


def from_top_level(config: Dict[str, Any]) -> Optional[Coordinates]:
    return _pair(config.get("nluDomainId"), config.get("nluDomainVersionId"))


def from_bot_flow_settings(config: Dict[str, Any]) -> Optional[Coordinates]:
    settings = config.get("botFlowSettings")
    if not isinstance(settings, dict):
        return None
    return _pair(settings.get("nluDomainId"), settings.get("nluDomainVersionId"))


def from_legacy_fields(config: Dict[str, Any]) -> Optional[Coordinates]:
    return _pair(config.get("domainId"), config.get("domainVersionId"))


def from_manifest(config: Dict[str, Any]) -> Optional[Coordinates]:
    manifest = config.get("manifest")
    if not isinstance(manifest, dict) or not isinstance(manifest.get("nluDomain"), dict):
        return None
    nlu_domain = manifest["nluDomain"]
    return _pair(nlu_domain.get("id"), nlu_domain.get("version"))


def from_key_scan(config: Dict[str, Any]) -> Optional[Coordinates]:
    """Last resort: first truthy top-level key mentioning 'domain', and one mentioning 'version'."""
    domain_id = None
    version_id = None
    for key, value in config.items():
        if not value or isinstance(value, (dict, list)):
            continue
        lowered = key.lower()
        if "version" in lowered:
            if version_id is None:
                version_id = value
        elif "domain" in lowered and domain_id is None:
            domain_id = value
    return _pair(domain_id, version_id)


STRATEGIES: List[Strategy] = [
    from_top_level,
    from_bot_flow_settings,
    from_legacy_fields,
    from_manifest,
    from_key_scan,
]


def resolve_nlu_coordinates(config: Dict[str, Any], strategies: Optional[List[Strategy]] = None) -> Optional[Coordinates]:
    """Return the first (domain_id, version_id) pair any strategy finds, else None."""
    for strategy in strategies or STRATEGIES:
        coordinates = strategy(config)
        if coordinates:
            return coordinates
    return None
