"""Global constants for the conexion application."""

FIRESTORE_BATCH_LIMIT = 400

# Collection names
USERS_COLLECTION = "users"
GROUPS_COLLECTION = "groups"
ACTIVITIES_COLLECTION = "activities"
ACTIVITY_RESPONSES_COLLECTION = "activityResponses"
COURSES_COLLECTION = "courses"
COURSE_PROGRESS_COLLECTION = "courseProgress"
SERVICES_COLLECTION = "services"
ATTENDANCE_COLLECTION = "attendanceRecords"
GRIDS_COLLECTION = "grids"

# User roles and genders
ROLE_PASTOR = "Pastor"
ROLE_MEMBER = "Member"
ROLES = (ROLE_PASTOR, ROLE_MEMBER)

GENDER_MALE = "Male"
GENDER_FEMALE = "Female"
GENDERS = (GENDER_MALE, GENDER_FEMALE)

# Groups
INVITATION_CODE_LENGTH = 6
INVITATION_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
MAX_GROUP_LEADERS = 2

# Courses
DEFAULT_DURATION_WEEKS = 9
WEEK_STATUS_UP_TO_DATE = "al-dia"
WEEK_STATUS_BEHIND = "atrasado"
WEEK_STATUS_PENDING = "pendiente"

# Lists
SEARCH_MIN_TERM_LENGTH = 2
SEARCH_RESULTS_LIMIT = 10
POPULAR_COURSES_LIMIT = 10

# Activities
RESPONSE_CONFIRMED = "confirmed"
RESPONSE_PENDING = "pending"
RESPONSE_DENIED = "denied"
RESPONSE_STATUSES = (RESPONSE_CONFIRMED, RESPONSE_PENDING, RESPONSE_DENIED)
MIN_ACTIVITY_NAME_LENGTH = 2
MIN_ACTIVITY_ADDRESS_LENGTH = 5
MIN_ACTIVITY_DESCRIPTION_LENGTH = 10

# Attendance
ATTENDANCE_NEW_ATTENDEES = "nuevos_asistentes"
ATTENDANCE_RESET = "reset"
ATTENDANCE_CONFERENCE = "conferencia"
ATTENDANCE_TYPES = (ATTENDANCE_NEW_ATTENDEES, ATTENDANCE_RESET, ATTENDANCE_CONFERENCE)

# Worship service slots, in display order
SERVICE_SLOTS = {
    "saturday-1": "Sábado NEXT 5PM",
    "saturday-2": "Sábado NEXT 7PM",
    "sunday-1": "Domingo 9AM",
    "sunday-2": "Domingo 11:30AM",
}

# Statistics
PERIOD_WEEK = "week"
PERIOD_MONTH = "month"
PERIOD_QUARTER = "quarter"
PERIOD_YEAR = "year"
PERIOD_TYPES = (PERIOD_WEEK, PERIOD_MONTH, PERIOD_QUARTER, PERIOD_YEAR)
TREND_MONTHS = {PERIOD_YEAR: 12, PERIOD_QUARTER: 4, PERIOD_MONTH: 6, PERIOD_WEEK: 1}
MONTHS_PER_TERM = 4
AGE_BANDS = ("-13", "13-17", "18-25", "26-35", "36-45", "46-55", "56+")
MONTH_ABBREVIATIONS = (
    "Ene",
    "Feb",
    "Mar",
    "Abr",
    "May",
    "Jun",
    "Jul",
    "Ago",
    "Sep",
    "Oct",
    "Nov",
    "Dic",
)
UNKNOWN_COURSE_NAME = "Curso desconocido"
