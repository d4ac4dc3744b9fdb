"""
Output Generation

Generates CSV, Markdown, and JSON reports from ranked recommendations.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from smartmatch.pipeline.orchestrator import RankedCandidate

logger = logging.getLogger(__name__)


def _csv_quote(value: str) -> str:
    """Quote a CSV field, doubling any embedded quotes."""
    return '"' + str(value).replace('"', '""') + '"'


def summarize_ranking(ranked: list[RankedCandidate]) -> dict:
    """Summary statistics for a ranking."""
    if not ranked:
        return {
            "total_candidates": 0,
            "avg_smart_score": 0,
            "boosted": 0,
            "insights_by_type": {},
            "top_candidate": None,
        }

    insights_by_type: dict[str, int] = {}
    for r in ranked:
        for insight in r.insights:
            insights_by_type[insight.type.value] = insights_by_type.get(insight.type.value, 0) + 1

    boosted = sum(
        1 for r in ranked
        if r.contextual_factors.optimal_time
        or r.contextual_factors.recently_active
        or r.contextual_factors.mutual_connections
    )

    top = ranked[0]
    return {
        "total_candidates": len(ranked),
        "avg_smart_score": sum(r.smart_score for r in ranked) / len(ranked),
        "boosted": boosted,
        "insights_by_type": insights_by_type,
        "top_candidate": {
            "user_id": top.candidate.user_id,
            "name": top.candidate.name,
            "smart_score": top.smart_score,
        },
    }


class OutputGenerator:
    """Generates various output formats from a ranking."""

    def __init__(
        self,
        output_dir: str | Path = "./outputs",
        formats: Optional[list[str]] = None,
        timestamp_filenames: bool = True,
        max_items_per_section: int = 20,
        include_methodology: bool = True,
    ):
        """Initialize output generator.

        Args:
            output_dir: Directory for output files
            formats: List of formats to generate (csv, markdown, json)
            timestamp_filenames: Whether to include timestamp in filenames
            max_items_per_section: Maximum candidates in the markdown table
            include_methodology: Whether to include methodology in reports
        """
        self.output_dir = Path(output_dir)
        self.formats = formats or ["csv", "markdown", "json"]
        self.timestamp_filenames = timestamp_filenames
        self.max_items_per_section = max_items_per_section
        self.include_methodology = include_methodology

        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _get_filename(self, base_name: str, extension: str) -> Path:
        """Generate output filename."""
        if self.timestamp_filenames:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"{base_name}_{timestamp}.{extension}"
        else:
            filename = f"{base_name}.{extension}"
        return self.output_dir / filename

    def _ranking_to_csv(self, ranked: list[RankedCandidate]) -> str:
        """Convert a ranking to CSV format."""
        lines = [
            "rank,user_id,name,profile_type,smart_score,base_score,behavior_score,"
            "pattern_score,optimal_time,recently_active,mutual_connections,insights"
        ]

        for i, r in enumerate(ranked, 1):
            profile_type = r.candidate.profile_type.value if r.candidate.profile_type else ""
            lines.append(
                f"{i},"
                f"{_csv_quote(r.candidate.user_id)},"
                f"{_csv_quote(r.candidate.name)},"
                f"{profile_type},"
                f"{r.smart_score:.2f},"
                f"{r.base_score:.2f},"
                f"{r.behavior_score:.2f},"
                f"{r.pattern_score:.2f},"
                f"{r.contextual_factors.optimal_time},"
                f"{r.contextual_factors.recently_active},"
                f"{r.contextual_factors.mutual_connections},"
                f"{_csv_quote(';'.join(insight.type.value for insight in r.insights))}"
            )

        return "\n".join(lines)

    def _generate_ranking_md(
        self,
        ranked: list[RankedCandidate],
        user_id: str,
        summary: dict,
    ) -> str:
        """Generate recommendations markdown report."""
        lines = [f"# Recommendations for {user_id}\n"]

        if self.include_methodology:
            lines.extend([
                "## Methodology\n",
                "Each candidate's smart score combines three signals:\n",
                "- **Base (40%)**: Industry, investment and experience compatibility",
                "- **Behavior (30%)**: Fit with industries and amounts you tend to like",
                "- **Pattern (30%)**: Similarity to your past successful matches",
                "- **Boosts**: x1.10 optimal time, x1.15 active in the last 24h, "
                "+5% per mutual connection (capped at 100)\n",
            ])

        lines.extend([
            f"*Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}*\n",
            f"*Candidates ranked: {summary.get('total_candidates', 0)}*\n",
            f"*Average smart score: {summary.get('avg_smart_score', 0):.1f}*\n",
        ])

        if not ranked:
            lines.append("\nNo candidates are currently available.")
            return "\n".join(lines)

        lines.extend([
            "\n## Top Candidates\n",
            "| Rank | Name | Type | Smart | Base | Behavior | Pattern | Why |",
            "|------|------|------|-------|------|----------|---------|-----|",
        ])

        for i, r in enumerate(ranked[:self.max_items_per_section], 1):
            why = "; ".join(insight.message for insight in r.insights) or "-"
            profile_type = r.candidate.profile_type.value if r.candidate.profile_type else "-"
            lines.append(
                f"| {i} | {r.candidate.name} | {profile_type} | "
                f"{r.smart_score:.1f} | {r.base_score:.1f} | "
                f"{r.behavior_score:.1f} | {r.pattern_score:.1f} | {why} |"
            )

        return "\n".join(lines)

    def generate_recommendations(
        self,
        ranked: list[RankedCandidate],
        user_id: str,
    ) -> dict[str, Path]:
        """Generate recommendation reports.

        Returns:
            Dictionary of format -> filepath
        """
        generated = {}
        summary = summarize_ranking(ranked)

        safe_user = "".join(c if c.isalnum() else "_" for c in user_id.lower())
        base_name = f"recommendations_{safe_user}"

        if "csv" in self.formats:
            filepath = self._get_filename(base_name, "csv")
            filepath.write_text(self._ranking_to_csv(ranked))
            generated["csv"] = filepath

        if "markdown" in self.formats:
            filepath = self._get_filename(base_name, "md")
            filepath.write_text(self._generate_ranking_md(ranked, user_id, summary))
            generated["markdown"] = filepath

        if "json" in self.formats:
            json_data = {
                "user_id": user_id,
                "summary": summary,
                "recommendations": [r.model_dump(mode="json") for r in ranked],
            }
            filepath = self._get_filename(base_name, "json")
            filepath.write_text(json.dumps(json_data, indent=2, default=str))
            generated["json"] = filepath

        logger.info(f"Generated recommendation reports for {user_id}: {list(generated.keys())}")
        return generated
