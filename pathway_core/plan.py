from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .types import AssessmentResult, Cluster, ConfigSnapshot

log = logging.getLogger(__name__)


RESOURCE_CATEGORIES: Tuple[str, ...] = ("courses", "readings", "practicals", "audio", "events")


def _item(item_id: str, title: str, detail: str, effort: str) -> Dict[str, str]:
    return {"id": item_id, "title": title, "detail": detail, "effort": effort}


_BASE_RESOURCES: Dict[str, List[Dict[str, str]]] = {
    "courses": [
        _item("course-foundations", "Foundations Course",
              "Start with a short, beginner-friendly course in this pathway.", "1-2 hrs/week"),
        _item("course-skills", "Core Skills Practice",
              "Build key skills using guided lessons and exercises.", "1 hr/week"),
    ],
    "readings": [
        _item("reading-articles", "Short Reading Pack",
              "Read 2-3 short articles to deepen understanding.", "30 mins/week"),
        _item("reading-book", "Intro Book/Guide", "Pick an easy, teen-friendly book or guide.", "10 pages/week"),
    ],
    "practicals": [
        _item("practical-mini", "Mini Project", "Create a small project to apply what you learn.", "1-2 hrs/week"),
        _item("practical-log", "Learning Log",
              "Keep a notebook of what you tried and what you learned.", "15 mins/week"),
    ],
    "audio": [
        _item("audio-episode", "One Short Audio",
              "Listen to a short audio/video lesson on the topic.", "15-30 mins/week"),
        _item("audio-reflect", "Reflection Audio", "Record a 2-minute voice note on what you learned.", "10 mins/week"),
    ],
    "events": [
        _item("event-club", "Join a Club Session", "Attend a school club or interest group meeting.", "1x per month"),
        _item("event-showcase", "Showcase Day", "Share your work at school or with family.", "1x per term"),
    ],
}

_DOMAIN_RESOURCES: Dict[str, Dict[str, List[Dict[str, str]]]] = {
    "science": {
        "courses": [
            _item("science-method", "Scientific Method Basics",
                  "Learn how to ask questions and test ideas.", "1 hr/week"),
            _item("science-foundation", "Science Foundations",
                  "Explore core concepts in physics, chemistry, and biology.", "1-2 hrs/week"),
        ],
        "practicals": [
            _item("science-experiment", "Home Experiments", "Try safe experiments with supervision.", "1 hr/week"),
        ],
        "audio": [
            _item("science-audio", "Science Curiosity Audio",
                  "Listen to a simple science story or explainer.", "20 mins/week"),
        ],
    },
    "tech": {
        "courses": [
            _item("tech-intro", "Intro to Technology",
                  "Learn basics of tools, devices, and how they work.", "1 hr/week"),
            _item("tech-build", "Build and Test", "Follow a guided build or repair activity.", "1-2 hrs/week"),
        ],
        "practicals": [
            _item("tech-prototype", "Prototype Challenge", "Create a simple model or prototype.", "1-2 hrs/week"),
        ],
    },
    "data": {
        "courses": [
            _item("data-basics", "Data Basics", "Learn how to read charts and simple data tables.", "1 hr/week"),
        ],
        "practicals": [
            _item("data-project", "Mini Data Project",
                  "Collect data from your daily routine and analyze it.", "1 hr/week"),
        ],
    },
    "health": {
        "courses": [
            _item("health-foundations", "Health Foundations",
                  "Learn about the body, wellness, and care basics.", "1 hr/week"),
        ],
        "practicals": [
            _item("health-first-aid", "First Aid Basics",
                  "Learn simple first aid steps with supervision.", "1 hr/week"),
        ],
    },
    "business": {
        "courses": [
            _item("business-basics", "Business Basics",
                  "Learn how businesses work and make decisions.", "1 hr/week"),
            _item("planning-basics", "Planning Skills", "Practice goal setting and time planning.", "30-45 mins/week"),
        ],
        "practicals": [
            _item("business-mini", "Mini Business Project",
                  "Plan a small project or school event budget.", "1-2 hrs/week"),
        ],
    },
    "finance": {
        "courses": [
            _item("finance-basics", "Finance Basics", "Learn how budgeting and saving work.", "1 hr/week"),
        ],
        "practicals": [
            _item("finance-budget", "Budget Practice", "Create a simple weekly budget.", "30 mins/week"),
        ],
    },
    "marketing": {
        "courses": [
            _item("marketing-basics", "Marketing Basics", "Learn how to communicate ideas clearly.", "1 hr/week"),
        ],
        "practicals": [
            _item("marketing-poster", "Create a Poster",
                  "Design a simple campaign poster for a school event.", "1 hr/week"),
        ],
    },
    "law": {
        "readings": [
            _item("law-civics", "Civics Reading", "Read about rules, governance, and rights.", "20 mins/week"),
        ],
        "practicals": [
            _item("law-debate", "Mini Debate", "Practice an argument with a classmate.", "30 mins/week"),
        ],
    },
    "media": {
        "courses": [
            _item("media-story", "Storytelling Skills", "Learn how to report and structure a story.", "1 hr/week"),
        ],
        "practicals": [
            _item("media-interview", "Interview Practice",
                  "Interview a friend or family member and summarize.", "45 mins/week"),
        ],
    },
    "education": {
        "courses": [
            _item("edu-mentoring", "Mentoring Basics", "Learn how to teach and explain clearly.", "45 mins/week"),
        ],
        "practicals": [
            _item("edu-tutor", "Peer Tutoring", "Help a friend with a subject.", "1 hr/week"),
        ],
    },
    "arts": {
        "courses": [
            _item("arts-basics", "Creative Fundamentals",
                  "Practice design, drawing, or performance skills.", "1 hr/week"),
        ],
        "practicals": [
            _item("arts-project", "Creative Project",
                  "Create a sketch, short story, or performance.", "1-2 hrs/week"),
        ],
    },
    "vocational": {
        "courses": [
            _item("vocational-tools", "Tools & Safety", "Learn basic tool handling and safety.", "1 hr/week"),
        ],
        "practicals": [
            _item("vocational-build", "Hands-on Practice", "Repair or build something simple.", "1-2 hrs/week"),
        ],
    },
}

# substring match on the lowercased cluster id, checked in this order
_DOMAIN_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("science", ("science",)),
    ("tech", ("engineering", "tech")),
    ("data", ("data", "ai")),
    ("health", ("health", "med")),
    ("business", ("business", "commercial", "mgmt")),
    ("finance", ("finance", "econ")),
    ("marketing", ("marketing",)),
    ("law", ("law", "gov")),
    ("media", ("media", "comm")),
    ("education", ("edu", "social")),
    ("arts", ("creative", "arts")),
    ("vocational", ("voc",)),
)

_FALLBACK_SUBJECTS: Dict[bool, List[str]] = {
    True: ["Mathematics", "English Language", "Basic Science"],
    False: ["Mathematics", "English Language", "Relevant electives"],
}
_FALLBACK_SKILLS: Dict[bool, List[str]] = {
    True: ["Curiosity", "Communication", "Problem solving"],
    False: ["Analytical thinking", "Communication", "Teamwork"],
}

_TASKS: Tuple[Tuple[str, str, str, str, str], ...] = (
    ("task-course", "Complete one learning session",
     "Finish one short course lesson or practice module.", "weekly", "courses"),
    ("task-reading", "Read a short guide", "Read 10 pages or one short article.", "weekly", "readings"),
    ("task-practical", "Do one practical activity", "Try a small project or experiment.", "weekly", "practicals"),
    ("task-audio", "Listen and reflect",
     "Listen to one audio lesson and jot down 2 insights.", "weekly", "audio"),
    ("task-event", "Join a learning event",
     "Attend one club meeting or group session this month.", "monthly", "events"),
)

MILESTONES: Tuple[Dict[str, Any], ...] = (
    {
        "id": "milestone-1",
        "title": "Month 1: Build momentum",
        "timeframe": "Weeks 1-4",
        "outcomes": [
            "Finish 4 learning sessions.",
            "Complete 2 practical activities.",
            "Attend 1 club or group session.",
        ],
    },
    {
        "id": "milestone-2",
        "title": "Month 2: Strengthen skills",
        "timeframe": "Weeks 5-8",
        "outcomes": [
            "Improve in your top two subjects.",
            "Create one small project you can show.",
            "Keep a weekly reflection log.",
        ],
    },
    {
        "id": "milestone-3",
        "title": "Month 3: Showcase growth",
        "timeframe": "Weeks 9-12",
        "outcomes": [
            "Share your project with a teacher or mentor.",
            "Identify the next course or pathway to explore.",
            "Set new goals for the next term.",
        ],
    },
)


def resolve_domains(cluster_id: str) -> List[str]:
    cid = cluster_id.lower()
    domains = [name for name, words in _DOMAIN_KEYWORDS if any(w in cid for w in words)]
    return domains or ["general"]


def _merge_unique(items: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
    """Drop repeats by title, first one wins."""

    seen = set()
    out: List[Dict[str, str]] = []
    for item in items:
        if item["title"] in seen:
            continue
        seen.add(item["title"])
        out.append(dict(item))
    return out


def build_resources(cluster: Cluster) -> Dict[str, List[Dict[str, str]]]:
    merged = {cat: [dict(i) for i in _BASE_RESOURCES[cat]] for cat in RESOURCE_CATEGORIES}
    for domain in resolve_domains(cluster.id):
        for cat, additions in _DOMAIN_RESOURCES.get(domain, {}).items():
            merged[cat] = _merge_unique(merged[cat] + additions)

    if cluster.next_steps:
        steps = [
            _item(f"step-{idx}", step, "Suggested next step from your pathway.", "30-60 mins")
            for idx, step in enumerate(cluster.next_steps)
        ]
        merged["practicals"] = _merge_unique(steps + merged["practicals"])
    return merged


def build_tasks(subjects: Sequence[str]) -> List[Dict[str, str]]:
    focus = " & ".join(subjects[:2])
    tasks = [
        {
            "id": "task-subjects",
            "title": "Focus on key subjects",
            "description": f"Spend extra time on {focus} this week.",
            "cadence": "weekly",
            "category": "subjects",
        }
    ]
    for task_id, title, description, cadence, category in _TASKS:
        tasks.append(
            {"id": task_id, "title": title, "description": description, "cadence": cadence, "category": category}
        )
    return tasks


def build_pathway_plan(cluster: Cluster) -> Dict[str, Any]:
    """Three-month study plan for one cluster.

    Pure and deterministic. Subjects and skills come from the cluster when it
    lists them, otherwise from the junior or senior defaults picked by the
    cluster id prefix. Resources start from the base set and grow with every
    domain the cluster id mentions; the cluster's own next steps lead the
    practicals.
    """

    junior = cluster.id.startswith("JSS_")
    subjects = list(cluster.subjects) or list(_FALLBACK_SUBJECTS[junior])
    skills = list(cluster.skills) or list(_FALLBACK_SKILLS[junior])
    return {
        "cluster_id": cluster.id,
        "summary": cluster.description,
        "subjects": subjects,
        "skills": skills,
        "what_they_do": list(cluster.what_they_do),
        "resources": build_resources(cluster),
        "tasks": build_tasks(subjects),
        "milestones": [dict(m, outcomes=list(m["outcomes"])) for m in MILESTONES],
    }


def plan_for_result(snapshot: ConfigSnapshot, result: AssessmentResult | Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Plan for the result's primary cluster; None when it has none or the snapshot lacks it."""

    primary = result.get("primary_cluster") if isinstance(result, dict) else result.primary_cluster
    if not primary:
        return None
    cluster = next((c for c in snapshot.clusters if c.id == primary), None)
    if cluster is None:
        log.warning("primary cluster %s is not in the snapshot; no plan", primary)
        return None
    return build_pathway_plan(cluster)
