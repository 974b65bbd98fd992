from .profile_wizard import BASE_STEPS, ProfileWizard, WizardState, WizardStep

__all__ = ["BASE_STEPS", "ProfileWizard", "WizardState", "WizardStep"]
