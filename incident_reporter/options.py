"""Fixed option lists offered by the incident report form."""

# ============================================================================
# SENTINELS
# ============================================================================

# Selecting one of these reveals an extra free-text field
OTHER_STREET = "Others"
OTHER_INCIDENT_TYPE = "Other"


# ============================================================================
# ADMINISTRATIVE LOCATIONS
# ============================================================================

CITIES = ("Arua City", "Gulu City", "Kampala City")

DIVISIONS = ("Ayivu Division", "Central Division")

STREETS = (
    "Arua Avenue",
    "Hospital Road",
    "Adumi Road",
    "Duka Road",
    "Market Lane",
    "Rhino-camp road",
    "Arua - Packwach road",
    "Onduparaka Road",
    "Wadrif Road",
    "Mango Road",
    "School Road",
    "Weatherhead Park Lane",
    "Mvaradri - Oluko road",
    "Ediofe Road",
    "Muni University road",
    OTHER_STREET,
)


# ============================================================================
# INCIDENT TYPES
# ============================================================================

INCIDENT_TYPES = (
    "Wrong Parking",
    "Congested roads",
    "Road Accident Incidence",
    "Reckless Driving incidence",
    "Road condition",
    "Offloading in non gazetted area",
    OTHER_INCIDENT_TYPE,
)


# ============================================================================
# DROPDOWNS
# ============================================================================

# Form field name -> options shown in its dropdown
DROPDOWN_OPTIONS = {
    "city": CITIES,
    "division": DIVISIONS,
    "street": STREETS,
    "incident_type": INCIDENT_TYPES,
}
