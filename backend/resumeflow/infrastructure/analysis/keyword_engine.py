"""Keyword Analysis Engine - heuristic AnalysisEnginePort for development.

Scores a resume from its extracted text: section headings, contact
details, quantified achievements and common skill keywords. Deployments
that need real analysis plug their own engine into the pipeline.
"""

import asyncio
import logging
import re
from typing import List

from ...domain.analysis.ports import AnalysisEnginePort, AnalysisError, AnalysisResult
from .text_extraction import extract_text

logger = logging.getLogger(__name__)

COMMON_SKILLS = (
    'javascript', 'python', 'java', 'react', 'nodejs', 'sql', 'html', 'css',
    'angular', 'vue', 'php', 'django', 'mongodb', 'postgresql',
    'aws', 'azure', 'docker', 'kubernetes', 'git', 'linux',
    'excel', 'powerpoint', 'photoshop',
    'customer service', 'sales', 'marketing', 'accounting', 'management',
    'leadership', 'communication', 'teamwork', 'problem solving',
)

# Whole words only: 'java' must not match inside 'javascript'
SKILL_PATTERNS = tuple(
    (skill, re.compile(rf'\b{re.escape(skill)}\b')) for skill in COMMON_SKILLS
)

EMAIL_PATTERN = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')
PHONE_PATTERN = re.compile(r'(?:\+\d{1,3}[\s-]?)?\(?\d{2,4}\)?[\s-]?\d{3,4}[\s-]?\d{3,4}')
METRIC_PATTERN = re.compile(r'\d+(?:\.\d+)?\s*(?:%|percent|k\b|m\b|million|x\b)', re.IGNORECASE)

EDUCATION_MARKERS = ('education', 'degree', 'university', 'college', 'diploma')
EXPERIENCE_MARKERS = ('experience', 'employment', 'work history')
CERTIFICATION_MARKERS = ('certification', 'certificate', 'certified')
LINK_MARKERS = ('linkedin.com', 'github.com', 'portfolio')

BASE_SCORE = 40
MIN_READABLE_CHARS = 20


def find_skills(lowered: str) -> List[str]:
    return [skill for skill, pattern in SKILL_PATTERNS if pattern.search(lowered)]


class KeywordAnalysisEngine(AnalysisEnginePort):
    """Keyword heuristics scorer.

    Score composition (clamped to [0, 100]):
        base 40, experience +15, education +10, skills up to +15,
        contact details +5 each, quantified achievements +5,
        certifications +5, portfolio/profile links +5

    Extraction and scoring run in a worker thread.
    """

    name = "keyword"

    async def analyze(self, content: bytes, mime_type: str) -> AnalysisResult:
        return await asyncio.to_thread(self.score_document, content, mime_type)

    def score_document(self, content: bytes, mime_type: str) -> AnalysisResult:
        """Synchronous extraction and scoring.

        Raises:
            AnalysisError: If the document has no readable text
        """
        text = extract_text(content, mime_type)
        if len(text.strip()) < MIN_READABLE_CHARS:
            raise AnalysisError("No readable text found in document")

        lowered = text.lower()
        feedback: List[str] = []
        suggestions: List[str] = []
        score = BASE_SCORE

        if any(marker in lowered for marker in EXPERIENCE_MARKERS):
            score += 15
            feedback.append('Professional experience clearly outlined')
        else:
            suggestions.append('Add a work experience section with your roles and responsibilities')

        if any(marker in lowered for marker in EDUCATION_MARKERS):
            score += 10
            feedback.append('Education background is included')
        else:
            suggestions.append('Include your education and qualifications')

        skills = find_skills(lowered)
        if skills:
            score += min(len(skills) * 3, 15)
            feedback.append(f"Good use of industry keywords ({', '.join(skills[:5])})")
        if len(skills) < 3:
            suggestions.append('Update skills section with relevant technologies and competencies')

        if EMAIL_PATTERN.search(text):
            score += 5
        else:
            suggestions.append('Add an email address to your contact information')

        if PHONE_PATTERN.search(text):
            score += 5
        else:
            suggestions.append('Add a phone number to your contact information')

        if METRIC_PATTERN.search(text):
            score += 5
            feedback.append('Achievements are backed by numbers')
        else:
            suggestions.append('Add more specific metrics and achievements')

        if any(marker in lowered for marker in CERTIFICATION_MARKERS):
            score += 5
            feedback.append('Certifications strengthen your profile')
        else:
            suggestions.append('Include relevant certifications')

        if any(marker in lowered for marker in LINK_MARKERS):
            score += 5
        else:
            suggestions.append('Include portfolio or professional profile links')

        if not feedback:
            feedback.append('Resume text is readable and was analyzed successfully')
        if not suggestions:
            suggestions.append('Tailor the summary to each role you apply for')

        score = max(0, min(100, score))
        logger.debug(f"Keyword analysis finished: score={score}, skills={len(skills)}")

        return AnalysisResult(score=score, feedback=feedback, suggestions=suggestions)
