"""Model-backed handlers behind the three API endpoints

Every downstream failure (extraction, model call, JSON parsing) is caught where
it happens and replaced by static fallback data, the callers always get a
well-formed answer.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional

from flask.logging import default_handler

from .config import Config
from .fallbacks import (
    DEFAULT_SOURCES,
    SAMPLE_NOTES,
    demo_mindmap,
    regeneration_fallback,
    verification_error,
    verification_fallback,
)
from .generator import Generator
from .helpers import parse_json_response
from .models import MindMap, Regeneration, Verdict
from .pdf import extract_text
from .sources import SourceFinder


def _url_list(value: Any) -> List[str]:
    """Model replies sometimes send a single URL string instead of a list"""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    return []


class _Service:
    def __init__(self, config: Config, generator: Generator):
        self.config = config
        self.generator = generator

        self.logger = logging.getLogger("app.services")
        self.logger.addHandler(default_handler)
        self.logger.setLevel(self.config.get("loglevel", default=logging.INFO))


class MindMapBuilder(_Service):
    """PDF -> text -> model -> node/edge graph"""

    def extract(self, pdf_bytes: bytes) -> str:
        try:
            text = extract_text(pdf_bytes)
        except Exception as ex:
            self.logger.warning("PDF text extraction failed, using sample notes: %s", ex)
            return SAMPLE_NOTES

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                "Extracted %d characters / %d tokens",
                len(text),
                self.generator.count_tokens(text),
            )
        return text

    def generate(self, text: str) -> Dict[str, Any]:
        try:
            reply = self.generator.complete(
                "mindmap_structure", data={"input": text}, options={"temperature": 0.7}
            )
            parsed = parse_json_response(reply)
            if not isinstance(parsed, dict) or "nodes" not in parsed:
                raise ValueError("reply has no 'nodes'")
            mindmap = MindMap.model_validate(
                {"nodes": parsed["nodes"], "edges": parsed.get("edges") or []}
            )
        except Exception as ex:
            self.logger.warning("Mind map generation failed, using demo graph: %s", ex)
            return demo_mindmap()

        dangling = mindmap.dangling_edges()
        if dangling:
            self.logger.warning("Dropping %d edges without endpoints", len(dangling))
            mindmap.drop_dangling_edges()

        return mindmap.strip_callbacks().to_wire()

    def build(self, pdf_bytes: bytes) -> Dict[str, Any]:
        return self.generate(self.extract(pdf_bytes))


class NodeRegenerator(_Service):
    """Ask the model for an improved label of a single node"""

    def regenerate(self, label: str) -> Dict[str, Any]:
        try:
            reply = self.generator.complete(
                "regenerate_node", variables={"label": label}, options={"temperature": 0.7}
            )
            result = parse_json_response(reply)
            if not isinstance(result, dict):
                raise ValueError("reply is not a JSON object")
            regenerated = Regeneration(
                new_content=result.get("newContent") or label,
                explanation=result.get("explanation") or "Content regenerated",
                sources=_url_list(result.get("sources")) or list(DEFAULT_SOURCES),
            )
        except Exception as ex:
            self.logger.warning("Regenerating '%s' failed: %s", label, ex)
            return regeneration_fallback(label)

        return regenerated.model_dump(by_alias=True)


class ConceptVerifier(_Service):
    """Judge each concept against reputable sources, one model call per node"""

    def __init__(
        self,
        config: Config,
        generator: Generator,
        source_finder: Optional[SourceFinder] = None,
    ):
        super().__init__(config, generator)
        self.source_finder = source_finder or SourceFinder(config, generator.variable_handler)

    def verify_concept(self, concept: str) -> Dict[str, Any]:
        try:
            sources = self.source_finder.find(concept)
            reply = self.generator.complete(
                "verify_concept",
                variables={
                    "concept": concept,
                    "sources": json.dumps([s.model_dump() for s in sources]),
                },
                options={"temperature": 0.3},
            )
            analysis = parse_json_response(reply)
            if not isinstance(analysis, dict):
                raise ValueError("reply is not a JSON object")
            verdict = Verdict(
                verified=analysis.get("verified"),
                confidence=analysis.get("confidence"),
                explanation=analysis.get("explanation"),
                corrections=analysis.get("corrections"),
                sources=[s.url for s in sources],
            )
        except Exception as ex:
            self.logger.warning("Verifying '%s' failed: %s", concept, ex)
            return verification_fallback()

        return verdict.model_dump(exclude_none=True)

    def _verify_node(self, node: Dict[str, Any]) -> Dict[str, Any]:
        return self.verify_concept(node["data"]["label"])

    def verify_all(self, nodes: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
        """Verify all nodes concurrently, keyed by node id

        Waits for every node, a failing node gets an error record and never
        affects the others.
        """
        results: Dict[str, Dict[str, Any]] = {}
        if not nodes:
            return results

        max_workers = self.config.verification.max_workers or len(nodes)
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = {pool.submit(self._verify_node, node): str(node["id"]) for node in nodes}
            for future in as_completed(futures):
                node_id = futures[future]
                try:
                    results[node_id] = future.result()
                except Exception as ex:
                    self.logger.warning("Verification of node %s failed: %s", node_id, ex)
                    results[node_id] = verification_error()

        self.logger.info("Verified %d nodes", len(results))
        return results
