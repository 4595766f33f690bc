"""
Prompt Templates
Bio request, agent instructions, and portrait prompts for the Stonewalkers campaign.
"""

from typing import Mapping

from app.models.fields import BioField

NOT_SPECIFIED = "Not specified"

# Guidance used when a bio field is still empty; filled fields are sent as-is to be expanded
BIO_FIELD_GUIDANCE = {
    BioField.APPEARANCE: "Research and generate based on ancestry/region and Character Sheet details.",
    BioField.BACKGROUND: "Research cultural background and create detailed history, at least 2 paragraphs long",
    BioField.PERSONALITY: "Generate based on cultural norms and personal experiences",
    BioField.AFFILIATIONS: "Research relevant organizations and create connections",
    BioField.CATCHPHRASE: "Create culturally appropriate saying",
    BioField.LANGUAGE_QUIRKS: "Research regional speech patterns",
    BioField.SUPERSTITIONS: "Research cultural beliefs and practices",
    BioField.DIET: "Research regional food culture and preferences",
    BioField.SECRETS: "Create meaningful secrets tied to world lore",
    BioField.CHARACTER_FLAWS: "Generate flaws that create story potential",
    BioField.WHAT_EXCITES: "Connect to broader world themes and conflicts",
    BioField.DYNAMIC_GOALS: "Create goals that can evolve with campaign",
    BioField.MOST_WANT: "Generate desires reflecting cultural values",
    BioField.WONT_DO: "Create moral boundaries based on background",
}

BIO_REQUEST_TEMPLATE = """You are an expert Stormlight Archive character creation agent. Research the knowledge base thoroughly to create an authentic, detailed Level 1 character bio for the STONEWALKERS ADVENTURE campaign based on the following information:

[IMPORTANT]
This is a Level 1 character for the pre-everstorm timeline. The everstorm has NOT happened yet. Characters have no stormlight experience or spren bonds.

[CHARACTER SHEET]
Player Name: {playerName}
Character Name: {characterName}
Sex: {sex}
Level: {level}
Ancestry: {ancestry}
Alignment: {alignment}

Attributes:
- Strength: {strength}
- Speed: {speed}
- Intellect: {intellect}
- Willpower: {willpower}
- Awareness: {awareness}
- Presence: {presence}

Stats:
- Health: {health}
- Focus: {focus}
- Marks: {marks}
- Lifting Capacity: {liftingCapacity}
- Movement: {movement}
- Recovery Die: {recoveryDie}
- Senses Range: {sensesRange}

Other Details:
- Conditions & Injuries: {conditionsInjuries}
- Expertises: {expertises}
- Talents: {talents}
- Weapons: {weapons}
- Armor & Equipment: {armorEquipment}
- Connections: {connections}

[EXISTING CHARACTER ELEMENTS - enhance/expand these]
{bio_block}

[RESEARCH INSTRUCTIONS]
1. If ancestry is specified, research that culture's customs, appearance, and social norms
2. If no ancestry is given, research various Rosharan cultures and select an appropriate one
3. Look up relevant geographical regions, their characteristics, and how they shape inhabitants
4. Research historical events, conflicts, and social issues that could inform the character's background (PRE-EVERSTORM)
5. Find examples of naming conventions, cultural practices, and typical occupations for Level 1 adventurers
6. Search for information about relevant organizations, religions, or social groups
7. If alignment is specified, ensure character traits, motivations, and moral choices reflect that alignment
8. Remember this character is just starting their adventure - no stormlight powers or spren bonds

Generate a comprehensive, research-backed Level 1 character for the Stonewalkers Adventure that demonstrates deep knowledge of pre-everstorm Roshar's cultures, history, and social structures."""

BIO_INSTRUCTIONS = """You are an expert Stormlight Archive character creation agent with access to comprehensive worldbuilding materials through both uploaded files and searchable knowledge bases.

[CAMPAIGN CONTEXT - CRITICAL]
- Creating Level 1 characters for the STONEWALKERS ADVENTURE campaign
- Timeline: the EVERSTORM has NOT yet happened - this is pre-everstorm Roshar
- Characters are brand new adventurers who have never used stormlight
- Characters have never been approached by a Spren for a nahel bond

[RESEARCH METHODOLOGY]
1. ANALYZE the provided character stats and any existing bio information
2. SEARCH the knowledge base for relevant cultural, geographical, and social information
3. RESEARCH character archetypes, naming conventions, and cultural practices
4. CROSS-REFERENCE findings with uploaded reference documents
5. SYNTHESIZE all information into a cohesive, lore-accurate character

[CHARACTER CREATION PRINCIPLES]
- Every detail should feel authentic to pre-everstorm Roshar's culture and magic system
- Include specific cultural details that demonstrate deep knowledge of the setting
- Create meaningful secrets and flaws that could drive interesting storylines
- Ensure character goals and motivations align with traditional Rosharan values and conflicts

IMPORTANT: Return ONLY a valid JSON object. Use your research to create rich, detailed, lore-accurate content for Level 1 Stonewalkers Adventure characters.

{
    "appearance": "detailed physical description with cultural/regional specifics",
    "background": "comprehensive history incorporating researched cultural and historical elements",
    "personality": "character traits reflecting cultural background and personal experiences",
    "affiliations": "specific organizations, groups, or loyalties based on research",
    "catchphrase": "culturally appropriate saying reflecting character's background",
    "languageQuirks": "speech patterns specific to region/culture/background",
    "superstitions": "beliefs and rituals authentic to Rosharan culture",
    "diet": "food preferences reflecting regional availability and cultural norms",
    "secrets": "at least one minor and one major secret that tie into broader world conflicts and lore",
    "characterFlaws": "flaws that create interesting story potential and character growth",
    "whatExcites": "motivations that connect to larger world themes and conflicts",
    "dynamicGoals": "objectives that could evolve with campaign events",
    "mostWant": "desires that reflect both personal and cultural values",
    "wontDo": "moral boundaries shaped by cultural background and personal ethics"
}"""

PORTRAIT_TEMPLATE = (
    "Generate a detailed D&D-style character portrait of {name} from the world of Roshar "
    "(Stormlight Archive). A person with {sex} features. The character should be depicted in a "
    "fantasy art style similar to D&D character portraits, with rich colors and detailed clothing "
    "appropriate to the Roshar setting. The background should suggest the world of Roshar with its "
    "unique architecture and environment featuring crystalline formations and storm-carved landscapes. "
    "High quality, detailed fantasy art, professional illustration style with vibrant colors and "
    "dramatic lighting.\n    Appearance: {appearance}\n    "
)


def build_bio_request(form_data: Mapping[str, str]) -> str:
    """Fill the bio request with every sheet value and the current bio fields."""
    sheet = {key: form_data.get(key) or NOT_SPECIFIED for key in (
        "playerName", "characterName", "sex", "level", "ancestry", "alignment",
        "strength", "speed", "intellect", "willpower", "awareness", "presence",
        "health", "focus", "marks", "liftingCapacity", "movement", "recoveryDie",
        "sensesRange", "expertises", "talents", "weapons", "armorEquipment", "connections",
    )}
    sheet["conditionsInjuries"] = form_data.get("conditionsInjuries") or "None specified"

    bio_block = "\n".join(
        f"- {field.label}: {form_data.get(field.value) or BIO_FIELD_GUIDANCE[field]}"
        for field in BioField
    )
    return BIO_REQUEST_TEMPLATE.format(bio_block=bio_block, **sheet)


def build_portrait_prompt(
    form_data: Mapping[str, str],
    additional_instructions: str = "",
    has_reference: bool = False,
) -> str:
    prompt = PORTRAIT_TEMPLATE.format(
        name=form_data.get("characterName") or "a character",
        sex=form_data.get("sex") or "neutral",
        appearance=form_data.get(BioField.APPEARANCE.value, ""),
    )

    if additional_instructions:
        prompt += f" Additional refining requirements: {additional_instructions}"

    if has_reference:
        prompt += (
            " Make the character's facial features and overall appearance resemble the provided "
            "reference image while maintaining the fantasy art style."
        )

    return prompt
