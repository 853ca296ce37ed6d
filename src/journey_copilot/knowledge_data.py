# Embedded knowledge tables
#
# Three exports, all plain dicts keyed by lowercase lookup key:
#   FRAMEWORKS          copywriting frameworks, keyed by acronym
#   SEQUENCE_TEMPLATES  outcome→sequence blueprints, keyed "<outcome>_<vertical>"
#   VERTICAL_GUIDES     per-vertical guidance, keyed by vertical name
#
# The same shapes are accepted from frameworks.json / sequences.json /
# verticals.json when JOURNEY_KNOWLEDGE_DIR is set (see knowledge.py).

FRAMEWORKS = {
    "aida": {
        "name": "AIDA Framework",
        "acronym": "AIDA",
        "components": ["Attention: Grab focus", "Interest: Provide info", "Desire: Build emotion", "Action: CTA"],
        "best_for": ["TOFU", "story-driven content", "email newsletters"],
        "tone": "positive, aspirational",
        "funnel_stage": "TOFU",
        "example": "Headline grabs attention → subheadline provides info → benefits build desire → CTA prompts action",
        "criticisms": "May feel formulaic; weak on proof elements",
        "relevance_score": 9.2,
    },
    "pas": {
        "name": "PAS Framework",
        "acronym": "PAS",
        "components": ["Problem: Identify pain", "Agitate: Amplify urgency", "Solve: Present solution"],
        "best_for": ["MOFU", "landing pages", "sales pages"],
        "tone": "urgent, problem-aware",
        "funnel_stage": "MOFU",
        "example": "Problem: Can't increase CLV. Agitate: Loses revenue yearly. Solve: Implement this automation.",
        "criticisms": "Can feel negative if not balanced with solution",
        "relevance_score": 8.9,
    },
    "fab": {
        "name": "FAB Framework",
        "acronym": "FAB",
        "components": ["Feature: What it is", "Advantage: What it does", "Benefit: How customer feels"],
        "best_for": ["All stages", "solution descriptions"],
        "tone": "customer-centric",
        "funnel_stage": "MOFU-BOFU",
        "example": "Feature: Automated workflows. Advantage: Saves 8 hours/week. Benefit: More time for strategy.",
        "criticisms": "Dry if not emotionally charged",
        "relevance_score": 8.7,
    },
    "bab": {
        "name": "BAB Framework",
        "acronym": "BAB",
        "components": ["Before: Current frustration", "After: Desired outcome", "Bridge: The product"],
        "best_for": ["MOFU", "social ads", "short copy"],
        "tone": "transformational",
        "funnel_stage": "MOFU",
        "example": "Before: Overwhelmed with manual tasks. After: Calm, organized, strategic. Bridge: The product.",
        "criticisms": "Requires strong visualization skills",
        "relevance_score": 9.1,
    },
    "4ps": {
        "name": "4Ps Framework",
        "acronym": "4Ps",
        "components": ["Promise: The hook", "Picture: Visualize", "Proof: Credibility", "Push: CTA"],
        "best_for": ["BOFU", "sales letters", "high-value pages"],
        "tone": "credible, aspirational",
        "funnel_stage": "BOFU",
        "example": "Promise: 3x conversions. Picture: Envision revenue growth. Proof: 100+ case studies. Push: Start free trial.",
        "criticisms": "Longer format required",
        "relevance_score": 9.4,
    },
    "hero": {
        "name": "Hero Section Framework",
        "acronym": "Hero",
        "components": ["Headline: UVP", "Subheadline: Context", "Visuals: Connection", "CTA: Action"],
        "best_for": ["All landing pages", "above-the-fold"],
        "tone": "immediate, benefit-focused",
        "funnel_stage": "TOFU-MOFU",
        "example": "Headline: 'Generate 10x Email Sequences in Hours'. Subheadline: 'AI-powered copywriting for DTC.' CTA: 'Start free.'",
        "criticisms": "Must be perfect or loses 80% of visitors",
        "relevance_score": 8.8,
    },
}

SEQUENCE_TEMPLATES = {
    "first_purchase_dtc": {
        "outcome": "First Purchase Acquisition",
        "vertical": "DTC",
        "duration": "7-14 days",
        "touch_points": 5,
        "triggers": ["Subscribed", "Viewed Product"],
        "cadence": "Every 2-3 days",
        "frameworks": ["AIDA", "FAB"],
        "key_messages": ["Welcome & Value Prop", "Social Proof", "Objection Buster", "Limited Offer"],
        "branching_logic": "IF clicks CTA THEN exit; IF views product THEN cart abandonment",
    },
    "cart_abandonment_dtc": {
        "outcome": "Cart Recovery",
        "vertical": "DTC",
        "duration": "48 hours",
        "touch_points": 3,
        "triggers": ["Abandoned Cart"],
        "cadence": "1h, 12h, 24h",
        "frameworks": ["PAS", "FAB"],
        "key_messages": ["Item Reminder", "Security Reassurance", "Final Push"],
        "branching_logic": "Hyper-urgent based on abandonment time",
    },
    "onboarding_supplements": {
        "outcome": "Habit Formation",
        "vertical": "Supplements",
        "duration": "21 days",
        "touch_points": 5,
        "triggers": ["First Purchase"],
        "cadence": "Every 3-4 days",
        "frameworks": ["AIDA", "4Ps"],
        "key_messages": ["Usage Instructions", "Scientific Credibility", "Testimonials", "Results Check-in"],
        "branching_logic": "IF no usage check-in THEN proactive support",
    },
    "lead_nurture_coaching": {
        "outcome": "Consultation Booking",
        "vertical": "Coaching",
        "duration": "30-60 days",
        "touch_points": 12,
        "triggers": ["Lead Magnet Download"],
        "cadence": "Every 2-3 days",
        "frameworks": ["PAS", "BAB", "4Ps"],
        "key_messages": ["Lead Magnet Delivery", "Authority Building", "Case Studies", "Pricing Objection Handling"],
        "branching_logic": "IF engages THEN accelerate; IF silent THEN re-engagement",
    },
    "donor_escalation_nonprofit": {
        "outcome": "Single to Recurring Donor",
        "vertical": "Nonprofit",
        "duration": "60 days",
        "touch_points": 4,
        "triggers": ["One-time Donation"],
        "cadence": "15d, 30d, 45d",
        "frameworks": ["BAB", "4Ps"],
        "key_messages": ["Thank You & Impact", "Mission Reinforcement", "Recurring Program Ask"],
        "branching_logic": "IF accepts recurring THEN VIP nurture",
    },
}

VERTICAL_GUIDES = {
    "supplements": {
        "vertical_name": "Supplements",
        "characteristics": ["Regulated health claims", "Repeat consumption", "Results take weeks to show"],
        "key_principles": ["No disease or cure claims (FDA/FTC)", "Lead with ingredient credibility", "Coach daily usage"],
        "common_outcomes": ["First Purchase", "Habit Formation", "Subscription Conversion"],
        "unique_considerations": "Every health benefit needs a qualifier; avoid before/after promises.",
    },
    "coaching": {
        "vertical_name": "Coaching",
        "characteristics": ["High-ticket offers", "Long consideration cycle", "Trust in the coach is the product"],
        "key_principles": ["Build authority before the ask", "Use case studies and transformation stories", "One CTA per email"],
        "common_outcomes": ["Lead Nurture", "Consultation Booking", "Program Enrollment"],
        "unique_considerations": "Income or outcome claims must be typical, not exceptional.",
    },
    "ecommerce": {
        "vertical_name": "E-commerce",
        "characteristics": ["Catalog breadth", "Price comparison shoppers", "Cart and browse signals available"],
        "key_principles": ["Trigger on behavior, not the calendar", "Show the product in the email", "Reduce checkout friction"],
        "common_outcomes": ["First Purchase", "Cart Recovery", "Repeat Purchase"],
        "unique_considerations": "Discount dependence erodes margin; prefer value and social proof first.",
    },
    "skincare": {
        "vertical_name": "Skincare",
        "characteristics": ["Routine-based usage", "Visual results", "High sensitivity to ingredient claims"],
        "key_principles": ["Teach the routine", "Set realistic timelines for results", "Use UGC and reviews"],
        "common_outcomes": ["First Purchase", "Habit Formation", "Replenishment"],
        "unique_considerations": "Cosmetic vs drug claims: avoid language implying treatment of conditions.",
    },
    "subscription": {
        "vertical_name": "Subscriptions",
        "characteristics": ["Recurring revenue", "Churn risk after early boxes", "Membership identity"],
        "key_principles": ["Win the first 30 days", "Celebrate milestones", "Make pausing easier than cancelling"],
        "common_outcomes": ["Onboarding", "Churn Prevention", "Upgrade"],
        "unique_considerations": "Renewal and price-change notices have disclosure requirements.",
    },
    "nonprofit": {
        "vertical_name": "Nonprofit",
        "characteristics": ["Mission-driven donors", "Impact accountability", "Seasonal giving peaks"],
        "key_principles": ["Thank before you ask again", "Show concrete impact", "Invite, don't guilt"],
        "common_outcomes": ["Donor Escalation", "Volunteer Activation", "Advocacy"],
        "unique_considerations": "Donation receipts and tax language must be accurate.",
    },
    "education": {
        "vertical_name": "Education",
        "characteristics": ["Application deadlines", "Multiple decision makers (students, parents)", "Long enrollment funnel"],
        "key_principles": ["Anchor emails to deadlines", "Address cost and outcomes", "Personalize by program"],
        "common_outcomes": ["Application Conversion", "Enrollment Confirmation", "Event Registration"],
        "unique_considerations": "Student data is sensitive; respect consent and minors' protections.",
    },
    "dtc": {
        "vertical_name": "DTC",
        "characteristics": ["Owned customer relationship", "Brand-led storytelling", "Direct response economics"],
        "key_principles": ["Lead with the brand promise", "Segment by purchase behavior", "Measure revenue per recipient"],
        "common_outcomes": ["First Purchase", "Cart Recovery", "Repeat Purchase"],
        "unique_considerations": "Default guidance when no specific vertical is detected.",
    },
}

# Framework keys recommended for each workflow step, by step name
STEP_FRAMEWORKS = {
    "INTRODUCTION": ["hero"],
    "DISCOVERY": ["aida"],
    "VALIDATION": ["aida", "fab"],
    "FRAMEWORK_APPLICATION": ["aida"],
    "CIRCLE_CONFIRMATION": ["pas", "bab"],
    "GOAL_SETTING": ["pas"],
    "ANALYSIS": ["4ps", "bab"],
    "EXECUTION": ["4ps", "fab", "pas"],
}

VERTICAL_FRAMEWORKS = {
    "supplements": ["fab", "4ps", "aida"],
    "coaching": ["bab", "4ps", "pas"],
    "dtc": ["aida", "hero", "pas"],
    "nonprofit": ["bab", "4ps"],
    "ecommerce": ["pas", "fab", "hero"],
}

# Free-text outcome cues → template outcome key (first match wins)
OUTCOME_ALIASES = [
    (("cart", "abandon"), "cart_abandonment"),
    (("donor", "donation", "recurring giving"), "donor_escalation"),
    (("onboard", "habit", "routine", "usage"), "onboarding"),
    (("nurture", "consult", "booking", "book a call", "discovery call"), "lead_nurture"),
    (("first purchase", "first order", "purchase", "buy", "sale"), "first_purchase"),
]
