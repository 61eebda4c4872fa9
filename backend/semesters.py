import datetime

from models import SEASON_RANK, Semester, TermDate

# Terms between the start term and the default graduation term.
_DEFAULT_PROGRAM_TERMS = 7


def next_term(season: str, year: int) -> tuple[str, int]:
    """
    Following regular term:
    - Spring YYYY -> Fall YYYY (skip Summer)
    - Summer YYYY -> Fall YYYY
    - Fall YYYY   -> Spring YYYY+1
    """
    if season == "Fall":
        return "Spring", year + 1
    return "Fall", year


def _precedes(season: str, year: int, other_season: str, other_year: int) -> bool:
    return (year, SEASON_RANK[season]) < (other_year, SEASON_RANK[other_season])


def default_setup_dates(today: datetime.date | None = None) -> tuple[TermDate, TermDate]:
    """Fall of this year through Spring four years out."""
    year = (today or datetime.date.today()).year
    return TermDate(month=8, year=year), TermDate(month=5, year=year + 4)


def default_graduation(start: TermDate) -> TermDate:
    """Seven regular terms after the start term, as May or August of that year."""
    season, year = start.season, start.year
    if season == "Summer":
        season = "Fall"
    for _ in range(_DEFAULT_PROGRAM_TERMS):
        season, year = next_term(season, year)
    return TermDate(month=5 if season == "Spring" else 8, year=year)


def generate_semesters(
    start: TermDate | None = None,
    grad: TermDate | None = None,
) -> list[Semester]:
    """
    Builds the chronological term list from start through graduation.

    A Summer start becomes Fall of the same year and the walk never emits
    Summer. The graduation term is always appended last, whatever the loop
    produced, so a Summer graduation shows up only there.
    """
    if start is None or grad is None:
        start, grad = default_setup_dates()

    season, year = start.season, start.year
    if season == "Summer":
        season = "Fall"
    grad_season, grad_year = grad.season, grad.year

    semesters: list[Semester] = []
    while _precedes(season, year, grad_season, grad_year):
        semesters.append(Semester(season=season, year=year))
        season, year = next_term(season, year)

    semesters.append(Semester(season=grad_season, year=grad_year))
    return semesters
