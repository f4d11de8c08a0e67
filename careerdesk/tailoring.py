"""Generate a tailored cover letter and CV from the stored profile and a job description."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date

from careerdesk.generation import TextGenerator
from careerdesk.log import get_logger
from careerdesk.models import CandidateProfile, GeneratedDocuments, JobDescriptor
from careerdesk.store import Store

log = get_logger(__name__)

NA = "N/A"

TECHNICAL_TERMS: list[str] = [
    "react", "typescript", "javascript", "python", "java", "node.js", "angular", "vue",
    "html", "css", "sql", "mongodb", "postgresql", "aws", "docker", "kubernetes",
    "git", "agile", "scrum", "rest", "api", "graphql", "firebase", "supabase",
    "frontend", "backend", "full-stack", "devops", "machine learning", "ai",
    "product management", "ux", "ui", "design", "figma", "adobe", "analytics",
]

COVER_LETTER_SYSTEM = (
    "You are a professional career advisor and expert writer who creates compelling "
    "cover letters that help candidates get interviews."
)
CV_SYSTEM = (
    "You are a professional career advisor and resume writer who creates ATS-friendly CVs "
    "that help candidates get interviews. Format the CV with clear sections and professional layout."
)

COVER_LETTER_MAX_TOKENS = 1000
CV_MAX_TOKENS = 1500
TEMPERATURE = 0.7


def extract_keywords(description: str) -> list[str]:
    """Vocabulary terms found inside any whitespace-separated token of *description*.

    Multi-word terms cannot live inside a single token, so they are looked up
    as phrases in the whitespace-normalised description instead.
    """
    tokens = (description or "").lower().split()
    phrase_text = " ".join(tokens)
    found: list[str] = []
    for term in TECHNICAL_TERMS:
        if " " in term:
            hit = term in phrase_text
        else:
            hit = any(term in token for token in tokens)
        if hit and term not in found:
            found.append(term)
    return found


def _value(v: object) -> str:
    if v is None or v == "":
        return NA
    if isinstance(v, date):
        return v.isoformat()
    return str(v)


def _end(end_date: date | None, is_current: bool = False) -> str:
    if is_current or end_date is None:
        return "Present"
    return end_date.isoformat()


def _job_block(job: JobDescriptor, keywords: list[str]) -> str:
    return (
        f"Job Title: {job.title}\n"
        f"Company: {job.company}\n"
        f"Job Description: {job.description}\n"
        f"Required Skills: {', '.join(job.skills) or NA}\n"
        f"Extracted Keywords: {', '.join(keywords)}"
    )


def build_cover_letter_prompt(profile: CandidateProfile, job: JobDescriptor, keywords: list[str]) -> str:
    pd = profile.personal_details
    experience = "\n".join(
        f"- {e.position} at {e.company_name} ({_value(e.start_date)} - {_end(e.end_date, e.is_current)})\n"
        f"  {e.description or ''}"
        for e in profile.experiences
    )
    education = "\n".join(
        f"- {e.degree} in {_value(e.field_of_study)} from {e.institution} "
        f"({_value(e.start_date)} - {_end(e.end_date)})"
        for e in profile.education
    )
    return f"""Generate a professional cover letter based on the following information:

{_job_block(job, keywords)}

Candidate Profile:
Name: {_value(pd and pd.full_name)}
Email: {_value(pd and pd.email)}
Phone: {_value(pd and pd.phone)}
Summary: {_value(pd and pd.summary)}

Work Experience:
{experience}

Education:
{education}

Please write a compelling cover letter that:
1. Addresses the hiring manager professionally
2. Highlights relevant experience that matches the job requirements
3. Incorporates the extracted keywords naturally
4. Shows enthusiasm for the role and company
5. Includes a strong closing statement
6. Is formatted professionally with proper paragraphs
7. Is approximately 300-400 words

Format the letter with proper business letter formatting."""


def build_cv_prompt(profile: CandidateProfile, job: JobDescriptor, keywords: list[str]) -> str:
    pd = profile.personal_details
    experience = "\n".join(
        f"- {e.position} at {e.company_name}\n"
        f"  Duration: {_value(e.start_date)} - {_end(e.end_date, e.is_current)}\n"
        f"  Description: {e.description or ''}"
        for e in profile.experiences
    )
    education = "\n".join(
        f"- {e.degree} in {_value(e.field_of_study)}\n"
        f"  Institution: {e.institution}\n"
        f"  Duration: {_value(e.start_date)} - {_end(e.end_date)}\n"
        f"  Grade: {_value(e.grade)}"
        for e in profile.education
    )
    return f"""Generate a professional CV/Resume tailored for the following job:

{_job_block(job, keywords)}

Candidate Profile:
Name: {_value(pd and pd.full_name)}
Email: {_value(pd and pd.email)}
Phone: {_value(pd and pd.phone)}
Address: {_value(pd and pd.address)}
Professional Summary: {_value(pd and pd.summary)}

Work Experience:
{experience}

Education:
{education}

Please create a professional CV that:
1. Formats the information in a clean, professional layout
2. Emphasizes skills and experience relevant to the job
3. Incorporates the extracted keywords naturally throughout
4. Uses action verbs and quantifiable achievements where possible
5. Follows standard CV formatting conventions
6. Highlights the most relevant qualifications
7. Is well-organized with clear sections

Include sections for: Contact Information, Professional Summary, Work Experience, Education, and Skills.
Format the CV professionally with clear section headers and bullet points."""


def _generate(generator: TextGenerator, system: str, prompt: str, max_tokens: int) -> str:
    return generator.complete(
        [{"role": "system", "content": system}, {"role": "user", "content": prompt}],
        temperature=TEMPERATURE,
        max_tokens=max_tokens,
    )


def generate_documents(
    store: Store,
    generator: TextGenerator,
    user_id: str,
    job: JobDescriptor,
) -> GeneratedDocuments:
    profile = store.load_profile(user_id)
    if profile.personal_details is None:
        log.info("No personal details stored for %s — prompts will use %s", user_id, NA)
    keywords = extract_keywords(job.description)

    with ThreadPoolExecutor(max_workers=2) as pool:
        letter = pool.submit(
            _generate, generator, COVER_LETTER_SYSTEM,
            build_cover_letter_prompt(profile, job, keywords), COVER_LETTER_MAX_TOKENS,
        )
        cv = pool.submit(
            _generate, generator, CV_SYSTEM,
            build_cv_prompt(profile, job, keywords), CV_MAX_TOKENS,
        )
        documents = GeneratedDocuments(
            cover_letter=letter.result(),
            cv=cv.result(),
            keywords=keywords,
        )

    log.info(
        "Documents generated for %s @ %s (%d keyword(s))",
        job.title, job.company, len(keywords),
    )
    return documents
