from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Literal
import smtplib
import logging
from email.message import EmailMessage

# Configure logging
logger = logging.getLogger(__name__)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

HouseholdType = Literal["single", "family"]
DeliveryMethod = Literal["doorstep", "phone_confirmed", "family_member"]
Role = Literal["volunteer", "admin", "super_admin"]
AssignmentStatus = Literal["active", "inactive", "completed"]

LANGUAGES: List[str] = ["english", "spanish", "chinese", "vietnamese", "tagalog", "arabic", "farsi", "hindi", "urdu"]


class SeniorIn(BaseModel):
    name: str = Field(..., min_length=1)
    age: Optional[int] = Field(None, ge=0, le=120)
    household_type: HouseholdType = "single"
    family_adults: int = Field(1, ge=0)
    family_children: int = Field(0, ge=0)
    race_ethnicity: Optional[str] = None
    health_conditions: Optional[str] = None
    address: str = Field(..., min_length=1)
    building: Optional[str] = None
    unit_apt: Optional[str] = None
    zip_code: Optional[str] = None
    dietary_restrictions: Optional[str] = None
    accessibility_needs: Optional[str] = None
    phone: Optional[str] = None
    emergency_contact: Optional[str] = None
    has_smartphone: bool = False
    preferred_language: str = "english"
    needs_translation: bool = False
    delivery_method: DeliveryMethod = "doorstep"
    special_instructions: Optional[str] = None
    active: bool = True


class VolunteerIn(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[str] = None
    role: Role = "volunteer"
    languages: List[str] = Field(default_factory=lambda: ["english"])
    availability: List[str] = Field(default_factory=list)
    vehicle_type: Literal["car", "truck", "van", "none"] = "none"
    vehicle_capacity: int = Field(0, ge=0)
    experience_level: Literal["beginner", "intermediate", "experienced"] = "beginner"
    special_skills: Optional[str] = None
    emergency_contact: Optional[str] = None
    notes: Optional[str] = None
    active: bool = True


class VolunteerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    address: Optional[str] = None
    role: Optional[Role] = None
    languages: Optional[List[str]] = None
    availability: Optional[List[str]] = None
    vehicle_type: Optional[Literal["car", "truck", "van", "none"]] = None
    vehicle_capacity: Optional[int] = Field(None, ge=0)
    experience_level: Optional[Literal["beginner", "intermediate", "experienced"]] = None
    special_skills: Optional[str] = None
    emergency_contact: Optional[str] = None
    notes: Optional[str] = None
    active: Optional[bool] = None


class AssignmentIn(BaseModel):
    senior_id: int
    volunteer_id: int
    assignment_date: str
    status: AssignmentStatus = "active"
    notes: Optional[str] = None


def send_email(settings, to_email: str, subject: str, body: str) -> bool:
    """Send a plain-text email using the configured SMTP server."""
    logger.info(f"Attempting to send '{subject}' to {to_email}")

    if not settings.smtp_enabled:
        # SMTP not configured; skip sending
        logger.warning("SMTP not configured. Email sending disabled.")
        return False

    logger.debug(f"SMTP Config - Host: {settings.smtp_host}, Port: {settings.smtp_port}, User: {settings.smtp_user}")

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.from_email or settings.smtp_user
    msg["To"] = to_email
    msg.set_content(body)

    try:
        logger.debug(f"Connecting to SMTP server {settings.smtp_host}:{settings.smtp_port}")
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as s:
            s.starttls()
            logger.debug("STARTTLS initiated")
            s.login(settings.smtp_user, settings.smtp_pass)
            logger.debug(f"Logged in as {settings.smtp_user}")
            s.send_message(msg)
            logger.info(f"✓ Email sent successfully to {to_email}")
        return True
    except smtplib.SMTPAuthenticationError as e:
        logger.error(f"SMTP Authentication failed: {e}")
        return False
    except smtplib.SMTPException as e:
        logger.error(f"SMTP Error: {e}")
        return False
    except OSError as e:
        logger.error(f"Unexpected error sending email: {e}")
        return False


def send_welcome_email(settings, to_email: str, name: str) -> bool:
    body = f"Hi {name},\n\nThank you for signing up to deliver meals."
    body += " An admin will assign seniors to you shortly; they will appear on your delivery checklist."
    body += "\n\n— Meal Delivery Team"
    return send_email(settings, to_email, "Meal Delivery Volunteer Signup", body)


def send_password_reset_email(settings, to_email: str, name: str, token: str) -> bool:
    body = f"Hi {name},\n\nUse this code to reset your password: {token}\n"
    body += f"The code expires in {settings.reset_token_minutes} minutes."
    body += "\n\nIf you did not ask for a reset you can ignore this message.\n\n— Meal Delivery Team"
    return send_email(settings, to_email, "Meal Delivery Password Reset", body)
