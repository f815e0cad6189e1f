"""
ESRS Topic Catalog

Predefined sustainability topics offered during topic identification,
grouped by ESG category and tagged with the ESRS topical standard code.

Based on:
- ESRS E1-E5 (Environment): Climate change, Pollution, Water and marine
  resources, Biodiversity and ecosystems, Resource use and circular economy
- ESRS S1-S4 (Social): Own workforce, Workers in the value chain,
  Affected communities, Consumers and end-users
- ESRS G1 (Governance): Business conduct

Each topic has:
- id: Slug stored as the topic name when the topic is selected
- label: Display name
- subcategory: ESRS code (E1-E5, S1-S4, G1)
"""

CATEGORIES = ("environmental", "social", "governance")

ESRS_TOPICS = {
    "environmental": {
        "label": "Environment (E1-E5)",
        "topics": [
            {"id": "ghg-emissions", "label": "GHG Emissions", "subcategory": "E1"},
            {"id": "energy-consumption", "label": "Energy Consumption", "subcategory": "E1"},
            {"id": "water-marine", "label": "Water & Marine Resources", "subcategory": "E3"},
            {"id": "biodiversity", "label": "Biodiversity & Ecosystems", "subcategory": "E4"},
            {"id": "circular-economy", "label": "Circular Economy & Waste", "subcategory": "E5"},
            {"id": "pollution", "label": "Pollution Prevention", "subcategory": "E2"},
        ],
    },
    "social": {
        "label": "Social (S1-S4)",
        "topics": [
            {"id": "working-conditions", "label": "Working Conditions", "subcategory": "S1"},
            {"id": "equal-opportunity", "label": "Equal Opportunity (Diversity, Inclusion)", "subcategory": "S1"},
            {"id": "health-safety", "label": "Health & Safety", "subcategory": "S1"},
            {"id": "human-rights", "label": "Human Rights", "subcategory": "S1"},
            {"id": "affected-communities", "label": "Affected Communities", "subcategory": "S3"},
            {"id": "end-users", "label": "End-users/Consumers", "subcategory": "S4"},
        ],
    },
    "governance": {
        "label": "Governance (G1)",
        "topics": [
            {"id": "anti-corruption", "label": "Anti-Corruption", "subcategory": "G1"},
            {"id": "board-diversity", "label": "Board Diversity & Structure", "subcategory": "G1"},
            {"id": "esg-risk-management", "label": "ESG Risk Management", "subcategory": "G1"},
            {"id": "executive-remuneration", "label": "Executive Remuneration", "subcategory": "G1"},
            {"id": "whistleblower", "label": "Whistleblower Mechanisms", "subcategory": "G1"},
        ],
    },
}

# Stakeholder groups offered in the report stage
STAKEHOLDER_OPTIONS = [
    "Employees",
    "Customers",
    "Suppliers",
    "Investors",
    "Regulators",
    "Communities",
    "NGOs",
    "Media",
    "Government",
    "Industry Partners",
]

# Reporting standards a material topic can be linked to
LINKED_STANDARDS = [
    "ESRS E1 - Climate Change",
    "ESRS E2 - Pollution",
    "ESRS E3 - Water and Marine Resources",
    "ESRS E4 - Biodiversity and Ecosystems",
    "ESRS E5 - Circular Economy",
    "ESRS S1 - Own Workforce",
    "ESRS S2 - Workers in Value Chain",
    "ESRS S3 - Affected Communities",
    "ESRS S4 - Consumers and End-users",
    "ESRS G1 - Business Conduct",
    "GRI 102 - General Disclosures",
    "GRI 201 - Economic Performance",
    "GRI 205 - Anti-corruption",
    "GRI 302 - Energy",
    "GRI 305 - Emissions",
    "SASB - Industry Standards",
]

RISK_OR_OPPORTUNITY = ("risk", "opportunity", "both")


def get_catalog_topic(slug):
    """Return (category, topic dict) for a catalog slug, or (None, None)."""
    for category, group in ESRS_TOPICS.items():
        for topic in group["topics"]:
            if topic["id"] == slug:
                return category, topic
    return None, None


def topic_label(slug):
    """Display label for a stored topic name; custom topics show their own text."""
    _, topic = get_catalog_topic(slug)
    return topic["label"] if topic else slug


def all_catalog_topics():
    """Flat list of catalog topics with their category attached."""
    return [
        {**topic, "category": category}
        for category, group in ESRS_TOPICS.items()
        for topic in group["topics"]
    ]
