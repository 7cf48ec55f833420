import logging

from sqlalchemy.orm import Session

from . import crud, models, schemas

logger = logging.getLogger(__name__)

# campos por defecto de la liga; Willingdon es el campo de referencia (slope 110)
DEFAULT_COURSES = [
    {
        "name": "Willingdon Golf Club",
        "slope": 110,
        "pars": [4, 3, 4, 4, 4, 3, 5, 3, 4, 3, 4, 3, 3, 3, 4, 3, 5, 3],
    },
    {
        "name": "BPGC",
        "slope": None,
        "pars": [5, 3, 4, 5, 4, 3, 4, 3, 4, 3, 4, 5, 3, 4, 4, 5, 3, 5],
    },
    {
        "name": "US Club",
        "slope": None,
        "pars": [5, 3, 3, 4, 4, 4, 4, 3, 4, 3, 4, 5, 4, 4, 4, 5, 4, 5],
    },
]

DISTANCE_BY_PAR = {3: 150, 4: 400, 5: 520}


def seed_organization(db: Session, organization: models.Organization):
    created = []
    for course_def in DEFAULT_COURSES:
        if crud.get_course_by_name(db, organization.id, course_def["name"]):
            continue

        course = crud.create_course(
            db,
            organization.id,
            schemas.CourseCreate(
                name=course_def["name"],
                tees="Blue",
                par_total=sum(course_def["pars"]),
                slope=course_def["slope"],
            ),
        )
        holes = [
            schemas.HoleCreate(number=i, par=par, distance=DISTANCE_BY_PAR[par])
            for i, par in enumerate(course_def["pars"], start=1)
        ]
        crud.upsert_holes_for_course(db, course, holes)
        created.append(course)

    logger.info("Seeded %d courses for %s", len(created), organization.slug)
    return created
