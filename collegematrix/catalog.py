"""Built-in catalog of Division I schools used by the school picker."""

from dataclasses import dataclass
from typing import Callable, List, Optional

from .models import School
from .normalize import format_location, make_school_id


@dataclass(frozen=True)
class SchoolEntry:
    name: str
    city: str
    state: str
    conference: Optional[str] = None


DIVISION_I_SCHOOLS: List[SchoolEntry] = [
    # ACC
    SchoolEntry("Boston College", "Chestnut Hill", "MA", "ACC"),
    SchoolEntry("Clemson University", "Clemson", "SC", "ACC"),
    SchoolEntry("Duke University", "Durham", "NC", "ACC"),
    SchoolEntry("Florida State University", "Tallahassee", "FL", "ACC"),
    SchoolEntry("Georgia Institute of Technology", "Atlanta", "GA", "ACC"),
    SchoolEntry("University of Louisville", "Louisville", "KY", "ACC"),
    SchoolEntry("University of Miami", "Coral Gables", "FL", "ACC"),
    SchoolEntry("University of North Carolina", "Chapel Hill", "NC", "ACC"),
    SchoolEntry("NC State University", "Raleigh", "NC", "ACC"),
    SchoolEntry("University of Notre Dame", "Notre Dame", "IN", "ACC"),
    SchoolEntry("University of Pittsburgh", "Pittsburgh", "PA", "ACC"),
    SchoolEntry("Syracuse University", "Syracuse", "NY", "ACC"),
    SchoolEntry("University of Virginia", "Charlottesville", "VA", "ACC"),
    SchoolEntry("Virginia Tech", "Blacksburg", "VA", "ACC"),
    SchoolEntry("Wake Forest University", "Winston-Salem", "NC", "ACC"),

    # Big Ten
    SchoolEntry("University of Illinois", "Champaign", "IL", "Big Ten"),
    SchoolEntry("Indiana University", "Bloomington", "IN", "Big Ten"),
    SchoolEntry("University of Iowa", "Iowa City", "IA", "Big Ten"),
    SchoolEntry("University of Maryland", "College Park", "MD", "Big Ten"),
    SchoolEntry("University of Michigan", "Ann Arbor", "MI", "Big Ten"),
    SchoolEntry("Michigan State University", "East Lansing", "MI", "Big Ten"),
    SchoolEntry("University of Minnesota", "Minneapolis", "MN", "Big Ten"),
    SchoolEntry("University of Nebraska", "Lincoln", "NE", "Big Ten"),
    SchoolEntry("Northwestern University", "Evanston", "IL", "Big Ten"),
    SchoolEntry("Ohio State University", "Columbus", "OH", "Big Ten"),
    SchoolEntry("Penn State University", "University Park", "PA", "Big Ten"),
    SchoolEntry("Purdue University", "West Lafayette", "IN", "Big Ten"),
    SchoolEntry("Rutgers University", "New Brunswick", "NJ", "Big Ten"),
    SchoolEntry("University of Wisconsin", "Madison", "WI", "Big Ten"),

    # Big 12
    SchoolEntry("Baylor University", "Waco", "TX", "Big 12"),
    SchoolEntry("Iowa State University", "Ames", "IA", "Big 12"),
    SchoolEntry("University of Kansas", "Lawrence", "KS", "Big 12"),
    SchoolEntry("Kansas State University", "Manhattan", "KS", "Big 12"),
    SchoolEntry("Oklahoma State University", "Stillwater", "OK", "Big 12"),
    SchoolEntry("Texas Christian University", "Fort Worth", "TX", "Big 12"),
    SchoolEntry("Texas Tech University", "Lubbock", "TX", "Big 12"),
    SchoolEntry("University of West Virginia", "Morgantown", "WV", "Big 12"),

    # Pac-12
    SchoolEntry("University of Arizona", "Tucson", "AZ", "Pac-12"),
    SchoolEntry("Arizona State University", "Tempe", "AZ", "Pac-12"),
    SchoolEntry("University of California, Berkeley", "Berkeley", "CA", "Pac-12"),
    SchoolEntry("UCLA", "Los Angeles", "CA", "Pac-12"),
    SchoolEntry("University of Colorado", "Boulder", "CO", "Pac-12"),
    SchoolEntry("University of Oregon", "Eugene", "OR", "Pac-12"),
    SchoolEntry("Oregon State University", "Corvallis", "OR", "Pac-12"),
    SchoolEntry("University of Southern California", "Los Angeles", "CA", "Pac-12"),
    SchoolEntry("Stanford University", "Stanford", "CA", "Pac-12"),
    SchoolEntry("University of Utah", "Salt Lake City", "UT", "Pac-12"),
    SchoolEntry("University of Washington", "Seattle", "WA", "Pac-12"),
    SchoolEntry("Washington State University", "Pullman", "WA", "Pac-12"),

    # SEC
    SchoolEntry("University of Alabama", "Tuscaloosa", "AL", "SEC"),
    SchoolEntry("University of Arkansas", "Fayetteville", "AR", "SEC"),
    SchoolEntry("Auburn University", "Auburn", "AL", "SEC"),
    SchoolEntry("University of Florida", "Gainesville", "FL", "SEC"),
    SchoolEntry("University of Georgia", "Athens", "GA", "SEC"),
    SchoolEntry("University of Kentucky", "Lexington", "KY", "SEC"),
    SchoolEntry("Louisiana State University", "Baton Rouge", "LA", "SEC"),
    SchoolEntry("University of Mississippi", "Oxford", "MS", "SEC"),
    SchoolEntry("Mississippi State University", "Starkville", "MS", "SEC"),
    SchoolEntry("University of Missouri", "Columbia", "MO", "SEC"),
    SchoolEntry("University of South Carolina", "Columbia", "SC", "SEC"),
    SchoolEntry("University of Tennessee", "Knoxville", "TN", "SEC"),
    SchoolEntry("Texas A&M University", "College Station", "TX", "SEC"),
    SchoolEntry("Vanderbilt University", "Nashville", "TN", "SEC"),

    # Other notable D1 schools
    SchoolEntry("Brigham Young University", "Provo", "UT"),
    SchoolEntry("University of Connecticut", "Storrs", "CT"),
    SchoolEntry("Georgetown University", "Washington", "DC"),
    SchoolEntry("Gonzaga University", "Spokane", "WA"),
    SchoolEntry("Marquette University", "Milwaukee", "WI"),
    SchoolEntry("Providence College", "Providence", "RI"),
    SchoolEntry("University of San Diego", "San Diego", "CA"),
    SchoolEntry("Villanova University", "Villanova", "PA"),
    SchoolEntry("Xavier University", "Cincinnati", "OH"),
]

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 10


def search_schools(query: str, limit: int = MAX_RESULTS) -> List[SchoolEntry]:
    """Case-insensitive substring match on name, city or state."""
    if len(query.strip()) < MIN_QUERY_LENGTH:
        return []
    q = query.lower()
    matches = [
        s for s in DIVISION_I_SCHOOLS
        if q in s.name.lower() or q in s.city.lower() or q in s.state.lower()
    ]
    return matches[:limit]


def to_school(entry: SchoolEntry, clock: Optional[Callable[[], float]] = None) -> School:
    return School(
        id=make_school_id(custom=False, clock=clock),
        name=entry.name,
        location=format_location(entry.city, entry.state),
        is_custom=False,
    )
