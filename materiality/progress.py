"""Assessment progress and per-stage completion."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProgressStats:
    total_topics: int
    scored_topics: int
    material_topics: int
    completed_reports: int
    overall_progress: int
    scoring_progress: int
    report_progress: int

    def to_dict(self):
        return {
            "totalTopics": self.total_topics,
            "scoredTopics": self.scored_topics,
            "materialTopics": self.material_topics,
            "completedReports": self.completed_reports,
            "overallProgress": self.overall_progress,
            "scoringProgress": self.scoring_progress,
            "reportProgress": self.report_progress,
        }


def _pct(part, whole):
    return round(part / whole * 100) if whole else 0


def compute_progress(topics):
    topics = list(topics)
    total = len(topics)
    scored = sum(1 for t in topics if t.is_scored)
    material = [t for t in topics if t.is_material]
    # Report completion counts every topic, not just material ones
    completed = sum(1 for t in topics if t.report_complete)
    completed_material = sum(1 for t in material if t.report_complete)
    return ProgressStats(
        total_topics=total,
        scored_topics=scored,
        material_topics=len(material),
        completed_reports=completed,
        overall_progress=_pct(completed, total),
        scoring_progress=_pct(scored, total),
        report_progress=_pct(completed_material, len(material)),
    )


def stage_completion(stats):
    """Completion badge per workflow stage."""
    return {
        "identification": stats.total_topics > 0,
        "scoring": stats.scored_topics == stats.total_topics and stats.total_topics > 0,
        "matrix": stats.material_topics > 0,
        "report": stats.completed_reports == stats.material_topics and stats.material_topics > 0,
    }
