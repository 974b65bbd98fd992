"""
HORP Bot menu safety engine.
Classifies menu items as safe, modifiable, or filtered for a diner's dietary preferences,
allergens, avoided ingredient flags, cross-contact tolerance and tolerated processed forms.
"""
