"""Breakdown generation: trigger -> steps -> completion.

Plans follow implementation intentions ("When situation X arises, I will
perform response Y"). Output is fully deterministic: step ids are derived
from step order and the environmental cue is the first cue in the table.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from inboxparser.engine.deep_prompts import get_primary_activity_type, infer_duration_from_answers
from inboxparser.models.breakdown import TaskBreakdown, TaskStep
from inboxparser.models.constants import DEFAULT_BREAKDOWN_DURATION_MIN
from inboxparser.models.enums import LifeAspect, StepStatus, TimePreference, TriggerType

logger = logging.getLogger(__name__)

StepTemplate = Sequence[Tuple[str, float]]

_F, _N, _C = LifeAspect.FITNESS, LifeAspect.NUTRITION, LifeAspect.CAREER
_FI, _S, _CH = LifeAspect.FINANCIAL, LifeAspect.SIDE_PROJECTS, LifeAspect.CHORES

# Generic three-phase template per aspect
ASPECT_STEPS: Dict[LifeAspect, StepTemplate] = {
    _F: [("Warm up", 0.15), ("Main session", 0.70), ("Cool down & stretch", 0.15)],
    _N: [("Prep ingredients", 0.25), ("Cook", 0.50), ("Plate & clean up", 0.25)],
    _C: [("Review context & goals", 0.15), ("Execute main work", 0.70), ("Document & communicate", 0.15)],
    _FI: [("Open accounts/apps", 0.20), ("Execute transactions", 0.50), ("Verify & record", 0.30)],
    _S: [("Set up environment", 0.10), ("Creative work session", 0.75), ("Save & backup", 0.15)],
    _CH: [("Gather supplies", 0.15), ("Main task", 0.70), ("Put away & finish", 0.15)],
}

ASPECT_COMPLETION: Dict[LifeAspect, str] = {
    _F: "Training session completed",
    _N: "Meal prepared and kitchen cleaned",
    _C: "Work deliverable completed and documented",
    _FI: "Financial task completed and verified",
    _S: "Creative output produced and saved",
    _CH: "Space transformed - visible improvement",
}

SATISFACTION_CHECKS: Dict[LifeAspect, str] = {
    _F: "Did I push beyond my comfort zone?",
    _N: "Did I enjoy the cooking process?",
    _C: "Did I make meaningful progress?",
    _FI: "Am I on track with my financial goals?",
    _S: "Did I create something I'm proud of?",
    _CH: "Does the space feel better now?",
}

ASPECT_CUES: Dict[LifeAspect, List[str]] = {
    _F: ["Gym bag packed by door", "Workout clothes laid out", "Water bottle filled"],
    _N: ["Recipe on counter", "Ingredients gathered", "Kitchen space cleared"],
    _C: ["Focus mode enabled", "Notifications silenced", "Materials gathered"],
    _FI: ["Banking apps ready", "Account numbers accessible", "Calculator at hand"],
    _S: ["Equipment connected", "Reference materials ready", "Distractions minimized"],
    _CH: ["Cleaning supplies ready", "Area cleared", "Trash bag ready"],
}

# Activity-specific templates keyed by aspect and sub-activity type
ACTIVITY_STEPS: Dict[LifeAspect, Dict[str, StepTemplate]] = {
    _F: {
        "technique": [("Dynamic warm-up", 0.10), ("Technique drills", 0.50), ("Light application", 0.25), ("Cool down & stretch", 0.15)],
        "sparring": [("Warm up & shadow box", 0.15), ("Technical sparring", 0.25), ("Competitive rounds", 0.40), ("Cool down & debrief", 0.20)],
        "heavy-bag": [("Jump rope warm-up", 0.15), ("Bag rounds (combinations)", 0.55), ("Power shots", 0.15), ("Stretch", 0.15)],
        "conditioning": [("Mobility warm-up", 0.15), ("Circuit training", 0.60), ("Finisher", 0.10), ("Cool down", 0.15)],
        "pads": [("Warm-up & wrapping", 0.10), ("Technical rounds", 0.50), ("Power rounds", 0.25), ("Stretch & recover", 0.15)],
        "strength": [("Warm-up & mobility", 0.15), ("Main lifts", 0.60), ("Accessory work", 0.15), ("Stretch", 0.10)],
        "cardio": [("Warm-up", 0.10), ("Main cardio session", 0.75), ("Cool down", 0.15)],
        "flexibility": [("Light warm-up", 0.15), ("Stretch routine", 0.70), ("Relaxation", 0.15)],
    },
    _N: {
        "quick": [("Gather ingredients", 0.20), ("Cook", 0.50), ("Plate & enjoy", 0.30)],
        "full-recipe": [("Mise en place", 0.15), ("Prep ingredients", 0.20), ("Cook", 0.45), ("Plate & clean up", 0.20)],
        "meal-prep": [("Plan & check inventory", 0.10), ("Prep all ingredients", 0.25), ("Cook (batch style)", 0.45), ("Portion & store", 0.15), ("Clean kitchen", 0.05)],
        "baking": [("Prepare ingredients", 0.15), ("Mix & prepare", 0.25), ("Bake", 0.45), ("Cool & finish", 0.15)],
    },
    _C: {
        "deep-work": [("Set up environment", 0.05), ("Review goals", 0.05), ("Deep work block", 0.75), ("Document progress", 0.10), ("Short break", 0.05)],
        "meeting": [("Review agenda & prep", 0.10), ("Meeting", 0.70), ("Document action items", 0.20)],
        "review": [("Gather materials", 0.15), ("Review & analyze", 0.60), ("Write feedback", 0.25)],
        "planning": [("Review current state", 0.20), ("Draft plan", 0.50), ("Review & finalize", 0.30)],
        "communication": [("Triage inbox", 0.20), ("Respond to priority items", 0.60), ("Schedule follow-ups", 0.20)],
        "learning": [("Set learning goal", 0.10), ("Study material", 0.65), ("Practice/apply", 0.15), ("Note key takeaways", 0.10)],
    },
    _FI: {
        "review": [("Open accounts", 0.20), ("Review transactions", 0.50), ("Note observations", 0.30)],
        "transfer": [("Verify details", 0.20), ("Execute transfer", 0.50), ("Confirm & record", 0.30)],
        "budget": [("Gather data", 0.25), ("Review categories", 0.45), ("Update plan", 0.30)],
        "investment": [("Review portfolio", 0.30), ("Analyze performance", 0.40), ("Note decisions", 0.30)],
        "planning": [("Review goals", 0.20), ("Analyze projections", 0.50), ("Update strategy", 0.30)],
    },
    _S: {
        "dj-practice": [("Set up equipment", 0.10), ("Warm-up mixing", 0.15), ("Main practice session", 0.55), ("Record & review", 0.15), ("Pack up", 0.05)],
        "music-production": [("Load project", 0.10), ("Creative work", 0.65), ("Mix & review", 0.15), ("Export & backup", 0.10)],
        "coding": [("Review & plan", 0.10), ("Code", 0.70), ("Test & debug", 0.15), ("Commit & document", 0.05)],
        "creative": [("Set up workspace", 0.10), ("Create", 0.75), ("Review & save", 0.15)],
        "learning": [("Set learning goal", 0.10), ("Study & practice", 0.70), ("Reflect & note", 0.20)],
    },
    _CH: {
        "cleaning": [("Gather supplies", 0.10), ("Clean area", 0.70), ("Put away supplies", 0.20)],
        "laundry": [("Sort & load", 0.15), ("Wash cycle", 0.40), ("Dry & fold", 0.35), ("Put away", 0.10)],
        "shopping": [("Check list", 0.10), ("Shop", 0.60), ("Unpack & organize", 0.30)],
        "organizing": [("Assess area", 0.15), ("Sort & organize", 0.60), ("Label & maintain", 0.25)],
        "maintenance": [("Gather tools", 0.15), ("Fix/maintain", 0.65), ("Clean up & test", 0.20)],
    },
}

ACTIVITY_COMPLETION: Dict[LifeAspect, Dict[str, str]] = {
    _F: {
        "technique": "Technique practice completed, new patterns drilled",
        "sparring": "Sparring rounds completed, partner debriefed",
        "heavy-bag": "Bag work finished, combinations practiced",
        "conditioning": "Conditioning circuit completed",
        "pads": "Pad work session finished",
        "strength": "All sets and reps completed",
        "cardio": "Cardio goal reached",
        "flexibility": "Full stretch routine completed",
    },
    _N: {
        "quick": "Meal prepared and kitchen tidied",
        "full-recipe": "Recipe completed, kitchen cleaned",
        "meal-prep": "All meals prepped and stored",
        "baking": "Baked goods finished and cooled",
    },
    _C: {
        "deep-work": "Work block completed with documented progress",
        "meeting": "Meeting completed with action items recorded",
        "review": "Review completed with feedback documented",
        "planning": "Plan drafted and reviewed",
        "communication": "Inbox processed and responded to",
        "learning": "Learning session completed with notes",
    },
    _FI: {
        "review": "Accounts reviewed and observations noted",
        "transfer": "Transfer completed and confirmed",
        "budget": "Budget reviewed and updated",
        "investment": "Portfolio reviewed with decisions noted",
        "planning": "Financial strategy updated",
    },
    _S: {
        "dj-practice": "Practice session recorded and reviewed",
        "music-production": "Track progress saved and backed up",
        "coding": "Code committed and documented",
        "creative": "Creative work saved",
        "learning": "New skill practiced with notes",
    },
    _CH: {
        "cleaning": "Area cleaned and supplies put away",
        "laundry": "Laundry done and put away",
        "shopping": "Shopping complete and items organized",
        "organizing": "Area organized and labeled",
        "maintenance": "Maintenance complete and tested",
    },
}

ACTIVITY_CUES: Dict[LifeAspect, Dict[str, str]] = {
    _F: {
        "technique": "Training notes ready",
        "sparring": "Mouthguard and gear packed",
        "heavy-bag": "Wraps ready by bag",
        "conditioning": "Timer set up",
        "pads": "Pads partner confirmed",
        "strength": "Workout logged, weights planned",
        "cardio": "Shoes and water ready",
        "flexibility": "Mat laid out",
    },
    _N: {
        "quick": "Quick ingredients accessible",
        "full-recipe": "Recipe on counter, ingredients gathered",
        "meal-prep": "Containers ready, shopping done",
        "baking": "Oven preheating, ingredients measured",
    },
    _C: {
        "deep-work": "Notifications off, environment quiet",
        "meeting": "Agenda reviewed, notes ready",
        "review": "Documents open, checklist ready",
        "planning": "Calendar and goals visible",
        "communication": "Inbox open, focus timer set",
        "learning": "Course/book open, notes ready",
    },
    _FI: {
        "review": "Banking apps logged in",
        "transfer": "Account details verified",
        "budget": "Spreadsheet open",
        "investment": "Portfolio dashboard open",
        "planning": "Financial goals visible",
    },
    _S: {
        "dj-practice": "Decks on, headphones ready",
        "music-production": "DAW loaded, project open",
        "coding": "Editor open, requirements clear",
        "creative": "Workspace cleared, materials ready",
        "learning": "Course materials queued",
    },
    _CH: {
        "cleaning": "Cleaning supplies gathered",
        "laundry": "Hamper by machine",
        "shopping": "List on phone, bags ready",
        "organizing": "Bins and labels ready",
        "maintenance": "Tools gathered, manual ready",
    },
}


def format_time_12hr(time_str: str) -> str:
    """ "19:00" -> "7pm", "07:30" -> "7:30am"."""
    hours, minutes = (int(part) for part in time_str.split(":"))
    period = "pm" if hours >= 12 else "am"
    display = hours % 12 or 12
    return f"{display}:{minutes:02d}{period}" if minutes else f"{display}{period}"


def generate_trigger(
    time: Optional[str] = None,
    location: Optional[str] = None,
    time_preference: Optional[TimePreference] = None,
) -> Tuple[str, TriggerType]:
    """Trigger phrase from time, then location, else a generic start."""
    parts: List[str] = []
    trigger_type = TriggerType.EVENT

    if time:
        parts.append(f"When it's {format_time_12hr(time)}")
        trigger_type = TriggerType.TIME
    elif time_preference and time_preference != TimePreference.ANYTIME:
        parts.append(f"When {TimePreference(time_preference).value} arrives")
        trigger_type = TriggerType.TIME

    if location:
        if parts:
            parts.append(f"and I'm at {location}")
        else:
            parts.append(f"When I arrive at {location}")
            trigger_type = TriggerType.LOCATION

    if not parts:
        parts.append("When I decide to start")
        trigger_type = TriggerType.EVENT

    return " ".join(parts), trigger_type


def calculate_step_times(start_time: Optional[str], total_duration: int, ratios: Sequence[float]) -> List[Optional[str]]:
    """Absolute HH:MM per step, walking forward from the start time."""
    if not start_time:
        return [None for _ in ratios]
    hours, minutes = (int(part) for part in start_time.split(":"))
    current = hours * 60 + minutes
    times = []
    for ratio in ratios:
        times.append(f"{(current // 60) % 24:02d}:{current % 60:02d}")
        current += round(total_duration * ratio)
    return times


def _build_steps(template: StepTemplate, total_duration: int, start_time: Optional[str]) -> List[TaskStep]:
    times = calculate_step_times(start_time, total_duration, [ratio for _, ratio in template])
    return [
        TaskStep(
            id=f"step-{index}",
            title=title,
            duration=round(total_duration * ratio),
            order=index,
            status=StepStatus.PENDING,
            scheduled_time=times[index - 1],
        )
        for index, (title, ratio) in enumerate(template, start=1)
    ]


def generate_breakdown(
    aspect: LifeAspect,
    *,
    time: Optional[str] = None,
    location: Optional[str] = None,
    time_preference: Optional[TimePreference] = None,
    total_duration: Optional[int] = None,
    activity_type: Optional[str] = None,
) -> TaskBreakdown:
    """Generate a breakdown for an aspect.

    Args:
        aspect: Life aspect of the task
        time: Start time (HH:MM), used for the trigger and step times
        location: Place, used for the trigger
        time_preference: Day-part, used for the trigger when no time is given
        total_duration: Minutes (defaults to 60)
        activity_type: Optional sub-activity from a deep prompt answer

    Returns:
        TaskBreakdown with deterministic step ids
    """
    aspect = LifeAspect(aspect)
    duration = total_duration or DEFAULT_BREAKDOWN_DURATION_MIN
    template = ASPECT_STEPS[aspect]
    completion = ASPECT_COMPLETION[aspect]
    cue = ASPECT_CUES[aspect][0]

    if activity_type and activity_type in ACTIVITY_STEPS[aspect]:
        template = ACTIVITY_STEPS[aspect][activity_type]
        completion = ACTIVITY_COMPLETION[aspect].get(activity_type, completion)
        cue = ACTIVITY_CUES[aspect].get(activity_type, cue)
    elif activity_type:
        logger.debug(f"No template for {aspect.value}/{activity_type}, using generic steps")

    trigger, trigger_type = generate_trigger(time, location, time_preference)
    return TaskBreakdown(
        trigger=trigger,
        trigger_type=trigger_type,
        environmental_cue=cue,
        steps=_build_steps(template, duration, time),
        completion_criteria=completion,
        satisfaction_check=SATISFACTION_CHECKS[aspect],
    )


def generate_breakdown_from_answers(
    aspect: LifeAspect,
    answers: Dict[str, str],
    *,
    time: Optional[str] = None,
    location: Optional[str] = None,
    time_preference: Optional[TimePreference] = None,
    total_duration: Optional[int] = None,
) -> TaskBreakdown:
    """Breakdown driven by deep prompt answers (activity type and duration)."""
    aspect = LifeAspect(aspect)
    return generate_breakdown(
        aspect,
        time=time,
        location=location,
        time_preference=time_preference,
        total_duration=total_duration or infer_duration_from_answers(aspect, answers),
        activity_type=get_primary_activity_type(aspect, answers),
    )


def generate_minimal_breakdown(
    aspect: LifeAspect,
    *,
    time: Optional[str] = None,
    location: Optional[str] = None,
    time_preference: Optional[TimePreference] = None,
) -> TaskBreakdown:
    """Trigger and completion only, without steps."""
    aspect = LifeAspect(aspect)
    trigger, trigger_type = generate_trigger(time, location, time_preference)
    return TaskBreakdown(
        trigger=trigger,
        trigger_type=trigger_type,
        environmental_cue=ASPECT_CUES[aspect][0],
        steps=[],
        completion_criteria=ASPECT_COMPLETION[aspect],
        satisfaction_check=SATISFACTION_CHECKS[aspect],
    )


def update_step_status(breakdown: TaskBreakdown, step_id: str, status: StepStatus) -> TaskBreakdown:
    """New breakdown with one step's status replaced."""
    steps = [
        step.model_copy(update={"status": StepStatus(status)}) if step.id == step_id else step
        for step in breakdown.steps
    ]
    return breakdown.model_copy(update={"steps": steps})


def calculate_breakdown_progress(breakdown: TaskBreakdown) -> int:
    """Completed steps as an integer percentage."""
    if not breakdown.steps:
        return 0
    done = sum(1 for step in breakdown.steps if step.status == StepStatus.DONE)
    return round(done / len(breakdown.steps) * 100)


def get_next_pending_step(breakdown: TaskBreakdown) -> Optional[TaskStep]:
    pending = sorted((s for s in breakdown.steps if s.status == StepStatus.PENDING), key=lambda s: s.order)
    return pending[0] if pending else None
