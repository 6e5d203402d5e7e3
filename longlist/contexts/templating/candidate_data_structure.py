"""
Candidate Record Data Structures

Defines the records the deck generator consumes: one CandidateRecord per CV, with
its work history and education entries. Records are frozen once built; the engine
never mutates them.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from omegaconf import OmegaConf


def _text(data: Mapping[str, Any], *keys: str) -> str:
    """Return the first present value among ``keys`` as a string ("" for missing/None)."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return str(value)
    return ""


@dataclass(frozen=True)
class WorkExperience:
    """
    One work history entry.

    Attributes:
        job_title: Role title
        company: Employer
        dates: Display string (e.g., "2019 - 2023"), never parsed
    """

    job_title: str = ""
    company: str = ""
    dates: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorkExperience":
        return cls(
            job_title=_text(data, "jobTitle", "job_title"),
            company=_text(data, "company"),
            dates=_text(data, "dates"),
        )

    def to_line(self) -> str:
        """Display line, e.g. "Acme Oy - CFO 2019 - 2023"."""
        line = f"{self.company} - {self.job_title}"
        return f"{line} {self.dates}" if self.dates else line


@dataclass(frozen=True)
class Education:
    """
    One education entry.

    Attributes:
        degree: Degree or qualification
        institution: School or university
        dates: Display string, never parsed
    """

    degree: str = ""
    institution: str = ""
    dates: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Education":
        return cls(
            degree=_text(data, "degree"),
            institution=_text(data, "institution"),
            dates=_text(data, "dates"),
        )

    def to_lines(self) -> List[str]:
        """Institution line (with dates when present) followed by the degree line."""
        institution = f"{self.institution} {self.dates}" if self.dates else self.institution
        return [institution, self.degree]


@dataclass(frozen=True)
class CandidateRecord:
    """
    Extracted data for one candidate.

    Sequences may be empty but never contain None.

    Factory methods:
        from_dict(data) - Build from extractor output (camelCase or snake_case keys)
    """

    name: str = ""
    work_history: Tuple[WorkExperience, ...] = field(default_factory=tuple)
    education: Tuple[Education, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CandidateRecord":
        """
        Build a record from a plain mapping.

        Accepts the extractor's camelCase keys (workHistory, jobTitle) as well as
        snake_case. Missing sequences become empty; None entries are dropped.

        Args:
            data: Mapping with name, workHistory/work_history, education

        Returns:
            CandidateRecord
        """
        work = data.get("workHistory", data.get("work_history")) or []
        education = data.get("education") or []
        return cls(
            name=_text(data, "name"),
            work_history=tuple(WorkExperience.from_dict(job) for job in work if job is not None),
            education=tuple(Education.from_dict(edu) for edu in education if edu is not None),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the extractor's camelCase keys."""
        return {
            "name": self.name,
            "workHistory": [
                {"jobTitle": job.job_title, "company": job.company, "dates": job.dates}
                for job in self.work_history
            ],
            "education": [
                {"degree": edu.degree, "institution": edu.institution, "dates": edu.dates}
                for edu in self.education
            ],
        }

    def without_roles(self, keyword: str) -> "CandidateRecord":
        """
        Return a copy without work history entries whose job title contains ``keyword``.

        Matching is case-insensitive.
        """
        keyword = keyword.lower()
        kept = tuple(job for job in self.work_history if keyword not in job.job_title.lower())
        return CandidateRecord(name=self.name, work_history=kept, education=self.education)


def records_from_data(data: Any) -> List[CandidateRecord]:
    """
    Build records from a loaded document.

    Accepts a bare list of records or a mapping with a "candidates" list.

    Raises:
        ValueError: If the document has neither shape
    """
    if isinstance(data, Mapping):
        data = data.get("candidates")
    if not isinstance(data, Sequence) or isinstance(data, str):
        raise ValueError("Records file must contain a list of candidates or a 'candidates' list")
    return [CandidateRecord.from_dict(entry) for entry in data]


def load_records(path: Path) -> List[CandidateRecord]:
    """
    Load candidate records from a YAML or JSON file.

    Args:
        path: Records file

    Returns:
        Records in file order
    """
    data = OmegaConf.to_container(OmegaConf.load(path), resolve=True)
    return records_from_data(data)
