app_name = "clinic_calendar"
app_title = "Clinic Calendar"
app_publisher = "Sebastian Ortiz Valencia"
app_description = "Calendario de citas de la clínica: vistas mensual, semanal y diaria"
app_email = "sebastianortiz989@gmail.com"
app_license = "mit"

# Apps
# ------------------

# required_apps = []

# Includes in <head>
# ------------------

# include js, css files in header of desk.html
# app_include_css = "/assets/clinic_calendar/css/clinic_calendar.css"
# app_include_js = "/assets/clinic_calendar/js/clinic_calendar.js"

# Calendar configuration
# ------------------
# Read from site_config.json under the "clinic_calendar" key, see
# clinic_calendar.clinic_calendar.calendar_view.settings

# Whitelisted API
# ------------------
# clinic_calendar.api.calendar_api.get_calendar_view
# clinic_calendar.api.calendar_api.change_appointment_status
# clinic_calendar.api.calendar_api.get_status_options
