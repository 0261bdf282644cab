"""Goal probability commentary from the Gemini generateContent endpoint.

The insight is a best-effort annotation: any failure (no key, network error,
bad status, malformed JSON, schema mismatch) yields None and is only logged.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

import requests
from pydantic import BaseModel, Field, ValidationError

from ..config import Settings, get_settings
from ..data.stats_parser import ProcessedStats
from ..utils.logging import get_logger
from .main_line import MainLineOdds

logger = get_logger(__name__)

CONFIDENCE_LEVELS = ("thấp", "trung bình", "cao", "rất cao")

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "goal_probability": {"type": "INTEGER"},
        "confidence_level": {"type": "STRING", "enum": list(CONFIDENCE_LEVELS)},
        "reasoning": {"type": "STRING"},
        "tactical_insight": {
            "type": "STRING",
            "description": "Phân tích chiều sâu chiến thuật cho người dùng.",
        },
        "historical_pattern": {"type": "STRING"},
    },
    "required": ["goal_probability", "confidence_level", "tactical_insight"],
}


class AIInsight(BaseModel):
    """Parsed completion."""

    goal_probability: int = Field(ge=0, le=100)
    confidence_level: Literal["thấp", "trung bình", "cao", "rất cao"]
    reasoning: str = ""
    tactical_insight: str
    historical_pattern: Optional[str] = None


@dataclass
class MatchContext:
    """Everything the prompt describes about the current match state."""

    match_id: str
    minute: int
    home_name: str
    away_name: str
    home_goals: int = 0
    away_goals: int = 0
    stats: Optional[ProcessedStats] = None
    home_api: float = 0.0
    away_api: float = 0.0
    over_line: Optional[MainLineOdds] = None
    handicap_line: Optional[MainLineOdds] = None
    tension: float = 0.0


def _pair(values) -> str:
    return f"{values[0]}-{values[1]}"


def build_prompt(context: MatchContext) -> str:
    """Vietnamese prompt embedding score, minute, stats and market state."""
    if context.stats:
        s = context.stats
        stats_text = (
            f"Tấn công: {_pair(s.attacks)}, Nguy hiểm: {_pair(s.dangerous_attacks)}, "
            f"Sút trúng: {_pair(s.on_target)}, Sút trượt: {_pair(s.off_target)}, "
            f"Phạt góc: {_pair(s.corners)}, Thẻ vàng: {_pair(s.yellowcards)}, Thẻ đỏ: {_pair(s.redcards)}"
        )
    else:
        stats_text = "N/A"

    lines = [
        f"Phân tích trận đấu bóng đá: {context.home_name} vs {context.away_name} "
        f"({context.home_goals}-{context.away_goals}) phút {context.minute}.",
        f"Thống kê: {stats_text}.",
        f"API: {context.home_api:.1f} vs {context.away_api:.1f} "
        f"(chênh lệch {context.home_api - context.away_api:+.1f}). "
        f"Mức căng thẳng: {context.tension:.0f}/100.",
    ]
    if context.over_line:
        q = context.over_line.quote
        lines.append(f"Kèo Tài/Xỉu chính: {context.over_line.handicap} (Tài {q.over:.3f}, Xỉu {q.under:.3f}).")
    if context.handicap_line:
        q = context.handicap_line.quote
        lines.append(
            f"Kèo châu Á chính: {context.handicap_line.handicap} (Đội nhà {q.home:.3f}, Đội khách {q.away:.3f})."
        )
    lines.extend([
        "Yêu cầu:",
        "1. Dự đoán xác suất nổ bàn thắng (0-100%) và mức độ tin cậy.",
        "2. Giải thích ngắn gọn (reasoning).",
        "3. Nhận định chiến thuật (tactical_insight): Nếu trận đấu đang tẻ nhạt, hãy giải thích lý do "
        "(bế tắc, đá thủ, v.v.) và dự đoán khi nào nhịp độ sẽ tăng.",
        "4. Nếu có, nêu diễn biến lịch sử tương tự (historical_pattern).",
        "Trả về JSON. Tiếng Việt.",
    ])
    return "\n".join(lines)


def parse_completion(payload: Any) -> Optional[AIInsight]:
    """Extract and validate the JSON text of the first candidate."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        logger.warning("AI response has no candidate text")
        return None

    try:
        return AIInsight.model_validate(json.loads(text.strip()))
    except (ValidationError, ValueError, AttributeError) as e:
        logger.warning(f"AI response rejected: {e}")
        return None


class GoalInsightRequester:
    """Ask the generative model for a goal probability insight."""

    def __init__(self, settings: Optional[Settings] = None, session: Optional[requests.Session] = None):
        self.settings = settings or get_settings()
        self.session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.settings.gemini_api_key)

    def _endpoint(self) -> str:
        base = self.settings.gemini_base_url.rstrip("/")
        return f"{base}/models/{self.settings.gemini_model}:generateContent"

    def request_insight(self, context: MatchContext) -> Optional[AIInsight]:
        """Request one completion. Returns None on any failure."""
        if not self.enabled:
            logger.info("No Gemini API key configured, skipping insight")
            return None

        body = {
            "contents": [{"parts": [{"text": build_prompt(context)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

        try:
            response = self.session.post(
                self._endpoint(),
                json=body,
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self.settings.gemini_api_key,
                },
                timeout=self.settings.gemini_timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Insight request failed: {e}")
            return None
        except ValueError:
            logger.error("Insight response was not JSON")
            return None

        insight = parse_completion(payload)
        if insight:
            logger.info(
                f"Insight for match {context.match_id}: {insight.goal_probability}% ({insight.confidence_level})"
            )
        return insight
