"""
Headless table-profile wizard.
Steps: dietary -> allergies -> cross-contact -> one tolerance question per selected allergen
that has a tolerated processed form. Session state lives in a caller-owned WizardState;
ProfileWizard itself holds no per-session data, so one instance serves concurrent sessions.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging

from horp.models.diner_profile import DinerProfile, NONE_OPTION
from horp.tolerance.tolerance_registry import ToleranceRegistry

logger = logging.getLogger(__name__)

MODE_MULTI = "multi"
MODE_SINGLE = "single"
TOLERANCE_STEP_PREFIX = "tolerance_"


@dataclass(frozen=True)
class WizardStep:
    id: str
    question: str
    options: tuple
    mode: str
    allergen: Optional[str] = None
    flag: Optional[str] = None


BASE_STEPS: tuple = (
    WizardStep("dietary", "Any dietary restrictions?", ("Vegetarian", "Vegan", "None"), MODE_MULTI),
    WizardStep("allergies", "Any allergies?", ("Gluten", "Sesame", "Shellfish", "Peanut", "None"), MODE_MULTI),
    WizardStep("crossContact", "Cross-contact OK?", ("Yes", "No"), MODE_SINGLE),
)


@dataclass
class WizardState:
    """Everything one wizard session knows. Owned and stored by the caller."""
    step: int = 0
    dietary_preferences: List[str] = field(default_factory=list)
    avoid_allergens: List[str] = field(default_factory=list)
    avoid_ingredient_flags: List[str] = field(default_factory=list)
    tolerate_flags: List[str] = field(default_factory=list)
    cross_contact_ok: Optional[bool] = None
    tolerance_answers: Dict[str, bool] = field(default_factory=dict)
    transcript: List[str] = field(default_factory=list)


def _toggle(selection: List[str], option: str) -> List[str]:
    """Multi-select with an exclusive 'none' option."""
    if option == NONE_OPTION:
        return [NONE_OPTION]
    if NONE_OPTION in selection:
        return [option]
    if option in selection:
        return [s for s in selection if s != option]
    return selection + [option]


def _discard(values: List[str], value: str) -> None:
    if value in values:
        values.remove(value)


class ProfileWizard:
    def __init__(self, tolerance_registry: Optional[ToleranceRegistry] = None):
        self._registry = tolerance_registry or ToleranceRegistry()

    def _tolerance_allergens(self, state: WizardState) -> List[str]:
        out = []
        for allergen in state.avoid_allergens:
            if allergen == NONE_OPTION:
                continue
            rel = self._registry.get(allergen.lower())
            if rel is not None and rel.tolerated_flag:
                out.append(allergen.lower())
        return out

    def total_steps(self, state: WizardState) -> int:
        return len(BASE_STEPS) + len(self._tolerance_allergens(state))

    def current_step(self, state: WizardState) -> Optional[WizardStep]:
        if state.step < len(BASE_STEPS):
            return BASE_STEPS[state.step]
        index = state.step - len(BASE_STEPS)
        allergens = self._tolerance_allergens(state)
        if index < len(allergens):
            allergen = allergens[index]
            rel = self._registry.get(allergen)
            return WizardStep(
                id=f"{TOLERANCE_STEP_PREFIX}{allergen}",
                question=rel.question or f"{allergen.capitalize()} allergy: can they have {rel.tolerated_flag}?",
                options=("Yes", "No"),
                mode=MODE_SINGLE,
                allergen=allergen,
                flag=rel.tolerated_flag,
            )
        return None

    def is_complete(self, state: WizardState) -> bool:
        return state.step >= self.total_steps(state)

    def is_step_valid(self, state: WizardState, step: Optional[WizardStep]) -> bool:
        if step is None:
            return False
        if step.id == "dietary":
            return len(state.dietary_preferences) > 0
        if step.id == "allergies":
            return len(state.avoid_allergens) > 0
        if step.id == "crossContact":
            return state.cross_contact_ok is not None
        if step.id.startswith(TOLERANCE_STEP_PREFIX):
            return step.allergen in state.tolerance_answers
        return False

    def is_option_selected(self, state: WizardState, option: str) -> bool:
        step = self.current_step(state)
        if step is None:
            return False
        lower = option.lower()
        if step.id == "dietary":
            return lower in state.dietary_preferences
        if step.id == "allergies":
            return lower in state.avoid_allergens
        if step.id == "crossContact":
            return state.cross_contact_ok is (option == "Yes")
        if step.id.startswith(TOLERANCE_STEP_PREFIX):
            answered = state.tolerance_answers.get(step.allergen)
            return answered is not None and answered is (option == "Yes")
        return False

    def _select_multi(self, state: WizardState, option: str, step: WizardStep) -> None:
        lower = option.lower()
        if step.id == "dietary":
            state.dietary_preferences = _toggle(state.dietary_preferences, lower)
        elif step.id == "allergies":
            previous = list(state.avoid_allergens)
            state.avoid_allergens = _toggle(state.avoid_allergens, lower)
            for allergen in previous:
                if allergen == NONE_OPTION or allergen in state.avoid_allergens:
                    continue
                rel = self._registry.get(allergen)
                if rel is None or not rel.tolerated_flag:
                    continue
                # Deselected: drop its tolerance answer and flag from both lists
                state.tolerance_answers.pop(allergen, None)
                _discard(state.tolerate_flags, rel.tolerated_flag)
                _discard(state.avoid_ingredient_flags, rel.tolerated_flag)

    def _select_single(self, state: WizardState, option: str, step: WizardStep) -> None:
        yes = option == "Yes"
        if step.id == "crossContact":
            state.cross_contact_ok = yes
        elif step.id.startswith(TOLERANCE_STEP_PREFIX):
            state.tolerance_answers[step.allergen] = yes
            # Keep tolerate/avoid lists contradiction-free
            if yes:
                if step.flag not in state.tolerate_flags:
                    state.tolerate_flags.append(step.flag)
                _discard(state.avoid_ingredient_flags, step.flag)
            else:
                if step.flag not in state.avoid_ingredient_flags:
                    state.avoid_ingredient_flags.append(step.flag)
                _discard(state.tolerate_flags, step.flag)

    def select_option(self, state: WizardState, option: str) -> WizardState:
        step = self.current_step(state)
        if step is None:
            return state
        if option not in step.options:
            logger.debug("WIZARD_IGNORED_OPTION step=%s option=%s", step.id, option)
            return state
        if step.mode == MODE_MULTI:
            self._select_multi(state, option, step)
        else:
            self._select_single(state, option, step)
        return state

    def summarize_step(self, state: WizardState, step: WizardStep) -> str:
        if step.id == "dietary":
            if NONE_OPTION in state.dietary_preferences:
                return "No dietary restrictions"
            return "Dietary: " + ", ".join(d.capitalize() for d in state.dietary_preferences)
        if step.id == "allergies":
            if NONE_OPTION in state.avoid_allergens:
                return "No allergies"
            return "Allergies: " + ", ".join(a.capitalize() for a in state.avoid_allergens)
        if step.id == "crossContact":
            return "Cross-contact: " + ("OK" if state.cross_contact_ok else "Not OK")
        if step.id.startswith(TOLERANCE_STEP_PREFIX):
            answer = "Yes" if state.tolerance_answers.get(step.allergen) else "No"
            return f"{step.allergen.capitalize()} tolerance: {answer}"
        return ""

    def go_next(self, state: WizardState) -> bool:
        """Advance if the current step has a valid selection. Returns False otherwise."""
        step = self.current_step(state)
        if not self.is_step_valid(state, step):
            return False
        state.transcript.append(self.summarize_step(state, step))
        state.step += 1
        return True

    def go_back(self, state: WizardState) -> bool:
        if state.step == 0:
            return False
        state.step -= 1
        return True

    def build_profile(self, state: WizardState) -> DinerProfile:
        return DinerProfile.from_dict({
            "dietaryPreferences": state.dietary_preferences,
            "avoidAllergens": state.avoid_allergens,
            "avoidIngredientFlags": state.avoid_ingredient_flags,
            "tolerateFlags": state.tolerate_flags,
            "crossContactOk": bool(state.cross_contact_ok),
            "tolerances": dict(state.tolerance_answers),
        })
