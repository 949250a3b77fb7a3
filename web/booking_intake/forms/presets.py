"""Fixed preset text the booking form is seeded with."""

PRESET_INCLUDES = (
    "Return International air fare + airport taxes + fuel surcharges + 20kg checked luggage",
    "Stay 05 Night as per itinerary based on twin / triple sharing",
    "Private touring in A/C coach with local Mandarin speaking guide as per itinerary",
    "Meals as per itinerary",
    "Tipping of tour guide & driver",
    "Travel Insurance (for age above 69 years old, require to top up RM108)",
    "01 tour leader service",
)

PRESET_EXCLUDES = (
    "Hotel Portage in/out luggage",
    "Other expenses which are not indicated in itinerary",
)

PRESET_SPECIAL_TERMS = (
    "A non-refundable deposit of {{RM500}} per person is required upon confirmation",
    "Full payment must be settled {{30}} days before departure",
    "Tour fare is based on a minimum group size of {{20}} paying passengers",
    "Single supplement of {{RM800}} applies for single room occupancy",
)

ITINERARY_LANGUAGES = ("English", "Chinese")

# Value of the language radio that switches to free text entry.
CUSTOM_LANGUAGE = "custom"
