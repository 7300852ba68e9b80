"""DSPy signature for payee classification agent."""

import dspy


class PayeeClassificationSignature(dspy.Signature):
    """
    Decide whether a payee name belongs to a business (organization) or an individual (person).

    CLASSIFICATION RULES:
    1. Legal entity suffixes (LLC, Inc, Ltd, GmbH, S.A.) indicate a business
    2. Words like Company, Corporation, Group, Partners indicate a business
    3. Government entities (City of, Department of) are businesses
    4. First name + last name patterns typically indicate an individual
    5. Professional titles (Dr, Mr, Mrs) and name suffixes (Jr, Sr, III) indicate an individual
    6. Consider naming conventions across languages and regions

    SIC CODES (businesses only):
    - Assign the most appropriate 4-digit SIC code for the apparent industry
    - Use 7389 (Business Services, NEC) when the industry is unclear
    - Government entities use 9199 (General Government, NEC)
    - Leave sic_code empty for individuals
    """

    payee_name: str = dspy.InputField(
        desc="Payee name exactly as it appears in the payment file"
    )

    classification: str = dspy.OutputField(
        desc="Exactly 'Business' or 'Individual'"
    )
    confidence: int = dspy.OutputField(
        desc="Confidence in the classification, integer from 0 to 100"
    )
    reasoning: str = dspy.OutputField(
        desc="One or two sentences explaining the decision"
    )
    sic_code: str = dspy.OutputField(
        desc="4-digit SIC code for businesses, empty string for individuals"
    )
    sic_description: str = dspy.OutputField(
        desc="Description of the SIC code, empty string for individuals"
    )
    matching_rules: str = dspy.OutputField(
        desc="JSON list of the classification rules that applied, e.g. [\"Legal suffix LLC\"]"
    )
