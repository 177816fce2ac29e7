"""
Question paper text rendering.

Produces the fixed three-part layout (A: 10 questions, B: 8, C: 2) from the
stored fields. Output depends only on the paper's stored data, so identical
records always render to identical text.
"""
from typing import List

from paperdesk.orm.question_paper import QuestionPaper, SECTION_SIZES

LINE_WIDTH = 72


def _center(text: str) -> str:
    return text.center(LINE_WIDTH).rstrip()


def _section(label: str, questions: List[str], first_number: int) -> List[str]:
    lines = ["", _center(f"PART {label}"), ""]
    for offset in range(SECTION_SIZES[label]):
        text = questions[offset] if offset < len(questions) else ""
        lines.append(f"{first_number + offset:>3}. {text}".rstrip())
    return lines


def render_text(paper: QuestionPaper) -> str:
    """Plain-text rendering of a stored question paper."""
    lines = [
        _center(paper.exam_name.upper()),
        _center(paper.department),
        "",
        f"Semester: {paper.semester}",
        f"Subject Code: {paper.subject_code}",
        f"Subject Title: {paper.subject_title}",
        f"Regulation: {paper.regulation}",
        f"Time: {paper.time}".ljust(LINE_WIDTH // 2) + f"Maximum Marks: {paper.max_marks}",
        "=" * LINE_WIDTH,
    ]

    number = 1
    for label, questions in (("A", paper.part_a), ("B", paper.part_b), ("C", paper.part_c)):
        lines.extend(_section(label, list(questions or []), number))
        number += SECTION_SIZES[label]

    lines.extend(["", "=" * LINE_WIDTH, ""])
    return "\n".join(lines)


def download_filename(paper: QuestionPaper) -> str:
    safe_code = "".join(c for c in paper.subject_code if c.isalnum() or c in "-_") or "paper"
    return f"question_paper_{safe_code}_{paper.id}.txt"
