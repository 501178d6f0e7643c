"""HTTP client for the medmap API"""

import os
from typing import Any, Dict, List, Optional

import requests

DEFAULT_SERVER = "http://localhost:13337"


class MindMapClient:
    """Thin wrapper around the three API endpoints, raises requests errors on failure"""

    def __init__(
        self,
        base_url: str = DEFAULT_SERVER,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, path: str, **kwargs) -> Any:
        response = self.session.post(self.base_url + path, timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return response.json()

    def process_pdf(self, path: str) -> Dict[str, List[Dict[str, Any]]]:
        with open(os.path.expanduser(path), "rb") as fp:
            files = {"file": (os.path.basename(path), fp, "application/pdf")}
            return self._post("/api/process-pdf", files=files)

    def regenerate_node(self, node: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/api/regenerate-node", json={"node": node})

    def verify_medical(self, nodes: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        return self._post("/api/verify-medical", json={"nodes": nodes})
