"""Data model shared by every stage of the pipeline."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

SegmentId = Union[int, str]


@dataclass(frozen=True)
class Keyword:
    """A search term from the narration script. `position` fixes its order."""

    term: str
    position: int

    def __str__(self) -> str:
        return self.term


@dataclass(frozen=True)
class Rendition:
    """One encoded variant of a stock-footage result."""

    quality: Optional[str]  # 'uhd' | 'hd' | 'sd' | None
    width: int
    height: int
    fps: Optional[float]
    url: str
    file_type: Optional[str] = None


@dataclass(frozen=True)
class CandidateSegment:
    """A search result that has not been downloaded yet."""

    id: SegmentId
    keyword: Keyword
    duration: float  # native duration, seconds
    renditions: Tuple[Rendition, ...] = ()
    source: str = "pexels"

    def has_quality(self, tier: str) -> bool:
        return any(r.quality == tier for r in self.renditions)


@dataclass(frozen=True)
class DownloadedSegment:
    """A candidate whose chosen rendition is on local disk."""

    candidate: CandidateSegment
    rendition: Rendition
    path: str

    @property
    def id(self) -> SegmentId:
        return self.candidate.id

    @property
    def keyword(self) -> Keyword:
        return self.candidate.keyword

    @property
    def duration(self) -> float:
        return self.candidate.duration


@dataclass(frozen=True)
class TrimmedClip:
    """A short, normalized leading cut of a downloaded segment."""

    segment_id: SegmentId
    path: str
    duration: float  # seconds, in [TRIM_MIN_SEC, TRIM_MAX_SEC)
    keyword: Keyword


@dataclass
class Timeline:
    """
    The ordered clips chosen to cover the narration.

    Either `total_duration >= target_duration`, or the Timeline holds every
    clip that was available.
    """

    target_duration: float
    clips: List[TrimmedClip] = field(default_factory=list)

    @property
    def total_duration(self) -> float:
        return sum(clip.duration for clip in self.clips)

    @property
    def is_covered(self) -> bool:
        return self.total_duration >= self.target_duration

    @property
    def shortfall(self) -> float:
        return max(0.0, self.target_duration - self.total_duration)

    @property
    def overshoot(self) -> float:
        return max(0.0, self.total_duration - self.target_duration)

    def clip_paths(self) -> List[str]:
        return [clip.path for clip in self.clips]

    def keyword_sequence(self) -> List[str]:
        return [clip.keyword.term for clip in self.clips]

    def __len__(self) -> int:
        return len(self.clips)

    def to_summary(self) -> Dict[str, Any]:
        return {
            "target_duration": self.target_duration,
            "total_duration": round(self.total_duration, 3),
            "covered": self.is_covered,
            "shortfall": round(self.shortfall, 3),
            "overshoot": round(self.overshoot, 3),
            "clips": [
                {
                    "segment_id": clip.segment_id,
                    "keyword": clip.keyword.term,
                    "keyword_position": clip.keyword.position,
                    "duration": clip.duration,
                    "path": clip.path,
                }
                for clip in self.clips
            ],
        }
