"""Static supplement safety tables.

Keys are matched as lower-case substrings of free-text ingredient and
medication names, so "Vitamin K2 (MK-7)" hits the "vitamin k" rules and
"Warfarin 5mg" hits "warfarin". The tables are read-only mappings built once
at import and shared by every evaluation.
"""

from types import MappingProxyType
from typing import FrozenSet, Mapping, Tuple

SAFETY_DISCLAIMER = (
    "IMPORTANT: These are potential interactions. Always consult your healthcare "
    "provider before starting new supplements."
)

INTERACTION_PREFIX = "INTERACTION: "

# Warnings that fire whenever the ingredient is present, with or without medications
HIGH_RISK_SUPPLEMENTS: Mapping[str, str] = MappingProxyType({
    "iron": "Iron supplements can be toxic in excess. Monitor iron levels and avoid if you have hemochromatosis.",
    "vitamin a": "High-dose Vitamin A can be toxic. Avoid during pregnancy.",
    "vitamin k": "Vitamin K affects blood clotting. Monitor if taking blood thinners.",
    "5-htp": "5-HTP affects serotonin levels. Can cause serotonin syndrome with antidepressants.",
    "same": "SAMe affects neurotransmitters. Can interact with antidepressants and blood thinners.",
    "ginseng": "Ginseng can affect blood pressure and blood sugar. Monitor if diabetic or hypertensive.",
    "ginkgo": "Ginkgo increases bleeding risk. Avoid before surgery or with blood thinners.",
    "garlic": "High-dose garlic increases bleeding risk. Avoid before surgery.",
    "ginger": "High-dose ginger increases bleeding risk and can affect blood pressure.",
    "turmeric": "Turmeric/Curcumin increases bleeding risk and can affect blood sugar.",
    "st. john's wort": "St. John's Wort interacts with many medications including birth control, antidepressants, and blood thinners.",
    "kava": "Kava can cause liver damage. Avoid if you have liver problems or take liver-affecting medications.",
    "yohimbe": "Yohimbe can cause dangerous blood pressure changes and heart problems.",
    "ephedra": "Ephedra (Ma Huang) can cause heart problems and is banned in many supplements.",
    "comfrey": "Comfrey can cause liver damage and is not safe for internal use.",
})


def _medication_rules(rules: dict) -> Mapping[str, str]:
    return MappingProxyType({key.lower(): warning for key, warning in rules.items()})


# ingredient keyword -> {medication keyword -> warning}
MEDICATION_INTERACTIONS: Mapping[str, Mapping[str, str]] = MappingProxyType({
    # Blood thinners and coagulation
    "vitamin k": _medication_rules({
        "warfarin": "Vitamin K can interfere with warfarin effectiveness. Monitor INR closely.",
        "coumadin": "Vitamin K can interfere with coumadin effectiveness. Monitor INR closely.",
        "heparin": "Vitamin K can affect clotting times with heparin.",
        "aspirin": "Monitor bleeding risk when combining Vitamin K with aspirin.",
    }),
    "garlic": _medication_rules({
        "warfarin": "Garlic may increase bleeding risk with warfarin.",
        "aspirin": "Garlic + aspirin increases bleeding risk.",
        "clopidogrel": "Garlic may increase bleeding risk with clopidogrel.",
    }),
    "ginkgo": _medication_rules({
        "warfarin": "Ginkgo significantly increases bleeding risk with warfarin.",
        "aspirin": "Ginkgo + aspirin increases bleeding risk.",
        "ibuprofen": "Ginkgo + NSAIDs increases bleeding risk.",
    }),
    # Mood and psychiatric medications
    "st. john's wort": _medication_rules({
        "ssri": "St. John's Wort may cause serotonin syndrome with SSRIs.",
        "antidepressants": "St. John's Wort may interact with antidepressants causing serotonin syndrome.",
        "birth control": "St. John's Wort can reduce birth control effectiveness.",
        "digoxin": "St. John's Wort can reduce digoxin levels.",
        "cyclosporine": "St. John's Wort can reduce cyclosporine levels.",
        "simvastatin": "St. John's Wort can reduce statin effectiveness.",
    }),
    "5-htp": _medication_rules({
        "ssri": "5-HTP with SSRIs may cause serotonin syndrome.",
        "antidepressants": "5-HTP with antidepressants may cause serotonin syndrome.",
        "maoi": "5-HTP with MAOIs can be dangerous.",
        "tramadol": "5-HTP with tramadol increases serotonin syndrome risk.",
    }),
    "same": _medication_rules({
        "antidepressants": "SAMe can interact with antidepressants.",
        "maoi": "SAMe with MAOIs can cause dangerous interactions.",
    }),
    # Cardiovascular medications
    "ginseng": _medication_rules({
        "blood pressure": "Ginseng may interact with blood pressure medications.",
        "ace inhibitor": "Ginseng may affect ACE inhibitor effectiveness.",
        "beta blocker": "Ginseng may interact with beta blockers.",
        "calcium channel blocker": "Ginseng may affect calcium channel blockers.",
        "digoxin": "Ginseng may increase digoxin levels.",
        "warfarin": "Ginseng may affect warfarin metabolism.",
    }),
    "hawthorn": _medication_rules({
        "digoxin": "Hawthorn may increase digoxin effects.",
        "beta blocker": "Hawthorn may enhance beta blocker effects.",
        "calcium channel blocker": "Hawthorn may enhance calcium channel blocker effects.",
    }),
    # Diabetes medications
    "chromium": _medication_rules({
        "insulin": "Chromium may enhance insulin effects - monitor blood sugar.",
        "metformin": "Chromium may enhance metformin effects.",
        "diabetes": "Chromium may affect blood sugar levels with diabetes medications.",
    }),
    "cinnamon": _medication_rules({
        "diabetes": "Cinnamon may enhance diabetes medication effects - monitor blood sugar.",
        "insulin": "Cinnamon may enhance insulin effects.",
    }),
    # Thyroid medications
    "iron": _medication_rules({
        "thyroid": "Iron can interfere with thyroid medication absorption. Take 4+ hours apart.",
        "levothyroxine": "Iron reduces levothyroxine absorption. Take 4+ hours apart.",
        "calcium": "Iron and calcium compete for absorption. Take separately.",
    }),
    "calcium": _medication_rules({
        "thyroid": "Calcium can interfere with thyroid medication absorption.",
        "levothyroxine": "Calcium reduces levothyroxine absorption. Take 4+ hours apart.",
        "antibiotics": "Calcium can reduce antibiotic absorption.",
    }),
    # Seizure medications
    "folate": _medication_rules({
        "phenytoin": "Folate may reduce phenytoin levels.",
        "carbamazepine": "Folate may interact with carbamazepine.",
        "valproic acid": "Folate may interact with valproic acid.",
    }),
    # Immunosuppressants
    "echinacea": _medication_rules({
        "immunosuppressant": "Echinacea may counteract immunosuppressive medications.",
        "cyclosporine": "Echinacea may reduce cyclosporine effectiveness.",
        "tacrolimus": "Echinacea may interact with tacrolimus.",
    }),
    # Antibiotics
    "zinc": _medication_rules({
        "antibiotic": "Zinc can reduce antibiotic absorption. Take 2+ hours apart.",
        "quinolone": "Zinc significantly reduces quinolone antibiotic absorption.",
    }),
    # Sleep medications
    "melatonin": _medication_rules({
        "sedative": "Melatonin may enhance sedative effects.",
        "sleeping pill": "Melatonin may enhance sleeping medication effects.",
        "benzodiazepine": "Melatonin may enhance benzodiazepine effects.",
    }),
    "valerian": _medication_rules({
        "sedative": "Valerian may enhance sedative effects.",
        "sleeping pill": "Valerian may enhance sleeping medication effects.",
    }),
})

# Fires when two or more members of a set are present in the same formula
SUPPLEMENT_CONFLICTS: Tuple[Tuple[FrozenSet[str], str], ...] = (
    (
        frozenset({"iron", "calcium"}),
        "Iron and Calcium compete for absorption. Take Iron and Calcium supplements 2+ hours apart.",
    ),
    (
        frozenset({"zinc", "copper"}),
        "High-dose Zinc can deplete Copper. Maintain 10:1 Zinc:Copper ratio.",
    ),
    (
        frozenset({"vitamin c", "iron"}),
        "Vitamin C enhances Iron absorption - monitor for iron overload if taking both.",
    ),
    (
        frozenset({"magnesium", "calcium"}),
        "High-dose Calcium can interfere with Magnesium absorption. Balance is important.",
    ),
    (
        frozenset({"5-htp", "same"}),
        "Both 5-HTP and SAMe affect serotonin/neurotransmitters. Avoid combining without medical supervision.",
    ),
)
