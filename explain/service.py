"""
Explain service orchestrator: screenshot in, structured explanation out.
"""
import logging
from typing import Any, Dict, Optional

from common.caching import SimpleCache, explain_cache
from common.config import config
from common.hashing import compute_cache_key, compute_data_hash
from common.llm_client import LLMClient
from common.metrics import RequestMetrics
from .models import SCREEN_ASSIST_SCHEMA, SCREEN_ASSIST_SCHEMA_NAME
from .normalizer import normalize_explain_result
from .prompt_pack import build_explain_input

logger = logging.getLogger(__name__)


class ExplainService:
    """Service to classify and explain a captured screenshot region."""

    def __init__(self, llm_client: Optional[LLMClient] = None, cache: Optional[SimpleCache] = None,
                 use_cache: bool = None, debug_metrics: bool = None):
        self.llm_client = llm_client or LLMClient()
        self.cache = cache if cache is not None else explain_cache
        self.use_cache = config.cache_enabled if use_cache is None else use_cache
        self.debug_metrics = config.debug_metrics if debug_metrics is None else debug_metrics

    def process(self, image_data_url: str, instruction: str = "") -> Dict[str, Any]:
        """
        Main processing pipeline.

        Args:
            image_data_url: base64 data URL of the captured region (data:image/...)
            instruction: optional extra user instruction

        Returns:
            {category, confidence, summary, followups} plus `_debug` when enabled
        """
        metrics = RequestMetrics()
        instruction = str(instruction or "").strip()

        cache_key = None
        if self.use_cache:
            cache_key = compute_cache_key(compute_data_hash(image_data_url), {"instruction": instruction})
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.info("Explain cache hit")
                metrics.cache_hit = True
                metrics.finish()
                return self._with_debug(dict(cached), metrics)

        # Stage 1: LLM call
        llm_response = self.llm_client.create_structured(
            build_explain_input(image_data_url, instruction),
            SCREEN_ASSIST_SCHEMA_NAME,
            SCREEN_ASSIST_SCHEMA,
        )
        metrics.add_llm_call(llm_response["tokens"])
        metrics.mark_stage("llm_done")

        # Stage 2: Validate against schema
        result = normalize_explain_result(llm_response["text"])
        metrics.mark_stage("normalization_done")
        logger.info("Explained region as %s (confidence %s)", result["category"], result["confidence"])

        if cache_key:
            self.cache.set(cache_key, dict(result))

        metrics.finish()
        return self._with_debug(result, metrics)

    def _with_debug(self, result: Dict[str, Any], metrics: RequestMetrics) -> Dict[str, Any]:
        if self.debug_metrics:
            result["_debug"] = metrics.to_dict()
        return result
