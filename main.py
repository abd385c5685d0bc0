#!/usr/bin/env python3
"""
ATS Resume Matcher CLI.

Scores resumes against job descriptions for ATS (Applicant Tracking
System) compatibility and generates application material.

Usage:
    python main.py match JOB_FILE -r resume.pdf      # Local keyword score
    python main.py analyze JOB_FILE -r resume.pdf    # AI score with local fallback
    python main.py compare a.pdf b.txt -j JOB_FILE   # Rank several resumes
    python main.py serve                             # Start the HTTP API
"""

import asyncio
import sys
from typing import Optional

import click
from dotenv import load_dotenv

from ats_matcher import __version__
from ats_matcher.errors import ATSMatcherError
from ats_matcher.matcher import MatchResult, MatchStrategy

STRATEGY_CHOICES = [strategy.value for strategy in MatchStrategy]


def _fail(message: str) -> None:
    click.echo(f"✗ Error: {message}", err=True)
    sys.exit(1)


def _read_job_description(job_file: Optional[str], text: Optional[str]) -> str:
    from ats_matcher.data_extraction import extract_text_from_file

    if job_file:
        click.echo(f"Job description: {job_file}")
        return extract_text_from_file(job_file)
    if text:
        click.echo("Job description: (provided via --text)")
        return text

    _fail("Provide a job description file or --text")


def _load_settings():
    from ats_matcher.config import load_settings
    from ats_matcher.logging_config import configure_logging

    load_dotenv()
    settings = load_settings()
    configure_logging(settings.log_level)
    return settings


def _print_result(result: MatchResult) -> None:
    click.echo("═" * 50)
    click.echo(f"  MATCH SCORE: {result.score}/100")
    click.echo("═" * 50)

    if result.matched_keywords:
        click.echo()
        click.echo("Matched Keywords:")
        click.echo(f"  {', '.join(result.matched_keywords)}")

    if result.missing_keywords:
        click.echo()
        click.echo("Missing Keywords:")
        click.echo(f"  {', '.join(result.missing_keywords)}")

    for title, items in (
        ("Suggestions", result.suggestions),
        ("STAR Format Points", result.star_format_points),
        ("ATS Optimizations", result.ats_optimizations),
    ):
        if items:
            click.echo()
            click.echo(f"{title}:")
            for item in items:
                click.echo(f"  • {item}")


@click.group()
@click.version_option(version=__version__, prog_name="ATS Resume Matcher")
def cli():
    """
    ATS Resume Matcher - Score your resume against job descriptions.

    Find matched and missing keywords, get improvement tips, and generate
    cover letters and outreach emails.
    """
    pass


@cli.command()
@click.argument("job_file", type=click.Path(exists=True), required=False)
@click.option(
    "--text",
    "-t",
    type=str,
    default=None,
    help="Job description text (alternative to file)",
)
@click.option(
    "--resume",
    "-r",
    type=click.Path(exists=True),
    required=True,
    help="Path to resume (.pdf or text)",
)
@click.option(
    "--strategy",
    "-s",
    type=click.Choice(STRATEGY_CHOICES),
    default=None,
    help="Local matching strategy (default from MATCH_STRATEGY)",
)
def match(job_file: str, text: str, resume: str, strategy: str):
    """
    Score a resume with local keyword matching only.

    Example:
        python main.py match vacancies/acme.txt -r resume.pdf
        python main.py match --text "React developer..." -r resume.txt -s frequency
    """
    from ats_matcher.data_extraction import extract_text_from_file
    from ats_matcher.matcher import analyze_locally
    from ats_matcher.validation import require_job_description, require_resume_text

    settings = _load_settings()

    try:
        job_text = require_job_description(_read_job_description(job_file, text))
        resume_text = require_resume_text(extract_text_from_file(resume))
        result = analyze_locally(resume_text, job_text, strategy or settings.match_strategy)
    except (ATSMatcherError, ValueError) as e:
        _fail(str(e))

    click.echo()
    _print_result(result)


@cli.command()
@click.argument("job_file", type=click.Path(exists=True), required=False)
@click.option(
    "--text",
    "-t",
    type=str,
    default=None,
    help="Job description text (alternative to file)",
)
@click.option(
    "--resume",
    "-r",
    type=click.Path(exists=True),
    required=True,
    help="Path to resume (.pdf or text)",
)
@click.option(
    "--strategy",
    "-s",
    type=click.Choice(STRATEGY_CHOICES),
    default=None,
    help="Local strategy used if AI analysis is unavailable",
)
def analyze(job_file: str, text: str, resume: str, strategy: str):
    """
    Score a resume with AI analysis, falling back to local matching.

    Example:
        python main.py analyze vacancies/acme.txt -r resume.pdf
    """
    from ats_matcher.ai_analysis import analyze_with_fallback
    from ats_matcher.data_extraction import extract_text_from_file
    from ats_matcher.llm_client import get_optional_client
    from ats_matcher.validation import require_job_description, require_resume_text

    settings = _load_settings()

    try:
        job_text = require_job_description(_read_job_description(job_file, text))
        resume_text = require_resume_text(extract_text_from_file(resume))
        client = get_optional_client(settings.llm)
        click.echo()
        click.echo("Analyzing with AI..." if client else "Analyzing locally...")
        outcome = analyze_with_fallback(
            resume_text, job_text, client, strategy or settings.match_strategy
        )
    except (ATSMatcherError, ValueError) as e:
        _fail(str(e))

    if outcome.warning:
        click.echo(f"! {outcome.warning}", err=True)

    click.echo()
    _print_result(outcome.result)


@cli.command()
@click.argument("resumes", nargs=-1, type=click.Path(exists=True))
@click.option(
    "--job",
    "-j",
    "job_file",
    type=click.Path(exists=True),
    default=None,
    help="Path to job description file",
)
@click.option(
    "--text",
    "-t",
    type=str,
    default=None,
    help="Job description text (alternative to file)",
)
@click.option(
    "--ai/--local",
    "use_ai",
    default=True,
    help="Use AI analysis when an API key is configured",
)
def compare(resumes: tuple[str, ...], job_file: str, text: str, use_ai: bool):
    """
    Compare several resumes against one job description.

    Example:
        python main.py compare alice.pdf bob.txt -j vacancies/acme.txt
    """
    from pathlib import Path

    from ats_matcher.ai_analysis import NO_CLIENT_WARNING, ResumeInput, compare_resumes, ranked
    from ats_matcher.data_extraction import extract_text_from_file
    from ats_matcher.llm_client import get_optional_client
    from ats_matcher.validation import require_job_description

    settings = _load_settings()

    try:
        job_text = require_job_description(_read_job_description(job_file, text))
        inputs = [
            ResumeInput(name=Path(path).name, text=extract_text_from_file(path))
            for path in resumes
        ]
        client = get_optional_client(settings.llm) if use_ai else None
        entries = asyncio.run(
            compare_resumes(inputs, job_text, client, settings.match_strategy)
        )
    except (ATSMatcherError, ValueError) as e:
        _fail(str(e))

    if use_ai and client is None:
        click.echo(f"! {NO_CLIENT_WARNING}", err=True)

    click.echo()
    click.echo("Resumes ranked by match score:")
    click.echo("-" * 50)

    for i, entry in enumerate(ranked(entries), 1):
        score_bar = "█" * (entry.result.score // 5)
        click.echo(f"{i}. {entry.name:25} {score_bar:20} {entry.result.score}")

    failed = [entry for entry in entries if not entry.scored]
    if failed:
        click.echo()
        for entry in failed:
            click.echo(f"! {entry.error}", err=True)


@cli.command("cover-letter")
@click.argument("job_file", type=click.Path(exists=True))
@click.option("--resume", "-r", type=click.Path(exists=True), required=True, help="Path to resume")
@click.option("--company", "-c", default=None, help="Company name")
@click.option("--manager", "-m", default=None, help="Hiring manager name")
@click.option("--instructions", "-i", default=None, help="Extra instructions for the letter")
def cover_letter(job_file: str, resume: str, company: str, manager: str, instructions: str):
    """
    Generate a cover letter (requires an LLM API key).

    Example:
        python main.py cover-letter vacancies/acme.txt -r resume.pdf -c Acme
    """
    from ats_matcher.data_extraction import extract_text_from_file
    from ats_matcher.generators import generate_cover_letter
    from ats_matcher.llm_client import get_client

    settings = _load_settings()

    try:
        letter = generate_cover_letter(
            extract_text_from_file(resume),
            extract_text_from_file(job_file),
            get_client(settings.llm),
            company_name=company,
            hiring_manager=manager,
            custom_instructions=instructions,
        )
    except ATSMatcherError as e:
        _fail(str(e))

    click.echo(letter.cover_letter)


@cli.command()
@click.argument("job_file", type=click.Path(exists=True))
@click.option(
    "--current",
    "-c",
    default="",
    help="Comma-separated skills already on the resume",
)
def skills(job_file: str, current: str):
    """
    Suggest skills to add for a job description (requires an LLM API key).
    """
    from ats_matcher.data_extraction import extract_text_from_file
    from ats_matcher.generators import optimize_skills
    from ats_matcher.llm_client import get_client

    settings = _load_settings()

    try:
        suggestions = optimize_skills(
            current, extract_text_from_file(job_file), get_client(settings.llm)
        )
    except ATSMatcherError as e:
        _fail(str(e))

    if not suggestions.suggested_skills:
        click.echo("No new skills to suggest.")
        return

    click.echo("Suggested Skills:")
    for skill in suggestions.suggested_skills:
        click.echo(f"  • {skill}")


@cli.command()
@click.argument("company")
@click.option("--country", default=None, help="Filter by person location")
@click.option("--title", "job_title", default=None, help="Keyword for the role")
def contacts(company: str, country: str, job_title: str):
    """
    Find recruiters and executives at COMPANY (requires APOLLO_API_KEY).

    Example:
        python main.py contacts "Acme Corp" --country "United States"
    """
    from ats_matcher.contacts import ContactQuery, ContactSearchClient

    settings = _load_settings()

    if not company.strip():
        _fail("Please enter a company name")

    try:
        found = ContactSearchClient(settings.contacts).search(
            ContactQuery(company_name=company.strip(), country=country, job_title=job_title)
        )
    except ATSMatcherError as e:
        _fail(str(e))

    if not found:
        click.echo("No contacts found. Try broadening your search criteria.")
        return

    for contact in found:
        click.echo(f"{contact.name} - {contact.title} ({contact.company})")
        click.echo(f"  Email: {contact.email}  Phone: {contact.phone}  Location: {contact.location}")
        if contact.linkedin_url:
            click.echo(f"  LinkedIn: {contact.linkedin_url}")


@cli.command()
@click.option(
    "--host",
    "-h",
    default="127.0.0.1",
    help="Host to bind to",
)
@click.option(
    "--port",
    "-p",
    default=8000,
    help="Port to bind to",
)
@click.option(
    "--reload/--no-reload",
    default=True,
    help="Enable auto-reload for development",
)
def serve(host: str, port: int, reload: bool):
    """
    Start the HTTP API server.

    Example:
        python main.py serve
        python main.py serve --port 8080
    """
    import uvicorn

    settings = _load_settings()

    if not settings.llm.configured:
        click.echo("Warning: LLM_API_KEY not set.", err=True)
        click.echo("AI analysis will fall back to keyword matching unless clients send a key.")
        click.echo()

    click.echo(f"Starting ATS Resume Matcher API on http://{host}:{port}")
    click.echo("Press Ctrl+C to stop")
    click.echo()

    uvicorn.run(
        "backend.api:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    cli()
