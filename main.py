"""Main FastAPI application for Blissful Bites.

 - Signup / signin (bcrypt, DB or JSON file backend)
 - Health details form -> BMI + health score
 - Daily meal tracking with photo calorie estimation (one worker per photo)
 - AI diet plans and quick tips (Groq, Gemini fallback)
 - Admin overview + direct messages
"""

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field, ValidationError
from starlette.datastructures import UploadFile
from starlette.middleware.sessions import SessionMiddleware
import asyncio
import logging
import os
import uvicorn

import config
import database
from services.auth import get_auth
from services.diet_plan import generate_diet_plan, generate_diet_tip
from services.health_score import calculate_bmi, calculate_health_score
from services.llm import AIServiceError
from services.meal_scan import MissingMealError, analyze_meal_uploads, merge_meals
from services.tracking import calorie_series, weight_series

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

app = FastAPI(title="Blissful Bites", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=config.SESSION_SECRET,
    same_site="lax",
)

templates = Jinja2Templates(directory=os.path.join(BASE_DIR, "templates"))

static_dir = os.path.join(BASE_DIR, "static")
images_dir = os.path.join(static_dir, "images")
os.makedirs(images_dir, exist_ok=True)
app.mount("/static", StaticFiles(directory=static_dir), name="static")
app.mount("/images", StaticFiles(directory=images_dir), name="images")

auth = get_auth(config.AUTH_BACKEND, config.USERS_JSON_PATH)


class Credentials(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


def _error(message: str, status_code: int):
    return JSONResponse({"error": message}, status_code=status_code)


def _is_admin(request: Request) -> bool:
    if not config.ADMIN_EMAILS:
        return True
    email = (request.session.get("email") or "").lower()
    return email in config.ADMIN_EMAILS


async def _credentials(request: Request):
    try:
        return Credentials.model_validate(await request.json())
    except (ValueError, ValidationError):
        return None


@app.on_event("startup")
async def startup_event():
    database.init_database()
    logger.info("Database initialized (auth backend: %s)", config.AUTH_BACKEND)


# Pages
@app.get("/")
async def index():
    return RedirectResponse("/login", status_code=302)


def _page(name: str):
    async def handler(request: Request):
        return templates.TemplateResponse(request, name, {"request": request})
    return handler


for _path, _tpl in [
    ("/login", "auth.html"),
    ("/signup", "signup.html"),
    ("/dashboard", "home.html"),
    ("/form", "form.html"),
    ("/track", "track.html"),
    ("/contact", "contact.html"),
    ("/user", "user.html"),
]:
    app.add_api_route(_path, _page(_tpl), methods=["GET"], response_class=HTMLResponse)


@app.get("/favicon.ico")
async def favicon():
    return Response(status_code=204)


# Auth
@app.post("/signup")
async def signup(request: Request):
    creds = await _credentials(request)
    if creds is None:
        return _error("Invalid request", 400)
    if auth.signup(creds.username, creds.password):
        return {"message": "Signup successful"}
    return _error("Username already exists or error occurred", 409)


@app.post("/signin")
async def signin(request: Request):
    creds = await _credentials(request)
    if creds is None:
        return _error("Invalid request", 400)
    if not auth.login(creds.username, creds.password):
        return _error("Invalid username or password", 401)
    request.session["email"] = creds.username
    return {"message": "Signin successful"}


@app.get("/logout")
async def logout(request: Request):
    request.session.clear()
    return RedirectResponse("/login", status_code=303)


@app.get("/firstlogin")
async def first_login(email: str = ""):
    if not email:
        return _error("Email is required", 400)
    try:
        has_details = database.check_email_exists(email)
    except Exception as e:
        logger.error("[firstlogin] Database error: %s", e)
        return _error("Database error", 500)
    return {"firstLogin": not has_details}


# Health details
@app.post("/userFormDetails")
async def user_form_details(request: Request):
    try:
        form = await request.form()
    except Exception as e:
        logger.warning("[userFormDetails] Error parsing form: %s", e)
        return _error("Invalid form data", 400)

    form_data = {}
    for key in form.keys():
        values = form.getlist(key)
        form_data[key] = values if len(values) > 1 else values[0]

    email = form_data.get("email")
    if not email or not isinstance(email, str):
        return _error("Email is required", 400)

    # The form page may leave the score to the server
    if not form_data.get("healthscore"):
        try:
            details = {
                "age": form_data.get("age"),
                "activity_level": form_data.get("activityLevel"),
                "diseases": database.join_multi(form_data.get("disease")),
                "weight": form_data.get("weight"),
                "target_weight": form_data.get("tweight"),
            }
            bmi = calculate_bmi(form_data.get("weight"), form_data.get("height"))
            form_data["healthscore"] = str(calculate_health_score(details, bmi))
        except (TypeError, ValueError):
            return _error("Invalid form data", 400)

    logger.info("[userFormDetails] Processing form data for email: %s", email)
    try:
        database.insert_user_data(form_data)
    except ValueError as e:
        logger.warning("[userFormDetails] Invalid form data: %s", e)
        return _error("Invalid form data", 400)
    except Exception as e:
        logger.error("[userFormDetails] Database insertion error: %s", e)
        return _error("Failed to save user data", 500)

    return RedirectResponse("/dashboard", status_code=302)


@app.get("/userDetails")
async def user_details(email: str = ""):
    if not email:
        return _error("Email is required", 400)
    try:
        user = database.get_user_details(email)
    except Exception as e:
        logger.error("[userDetails] Database query error: %s", e)
        return _error("Database error", 500)
    if not user:
        return _error("User not found", 404)

    bmi = calculate_bmi(user["weight"], user["height"])
    health_score = calculate_health_score(user, bmi)
    if health_score != user["healthscore"]:
        try:
            database.update_healthscore(email, health_score)
        except Exception as e:
            logger.error("[userDetails] Failed to update health score: %s", e)

    try:
        track = database.parse_track(user["track"])
    except ValueError as e:
        logger.error("[userDetails] Bad track data for %s: %s", email, e)
        track = []

    return {
        **user,
        "diet_plan": user["diet_plan"] or "",
        "dm": user["dm"] or "",
        "healthscore": health_score,
        "track": track,
        "bmi": bmi,
    }


@app.get("/userBasicInfo")
async def user_basic_info(email: str = ""):
    if not email:
        return _error("Email is required", 400)
    try:
        name = database.get_user_name(email)
    except Exception as e:
        logger.error("[userBasicInfo] Error fetching name: %s", e)
        return _error("Failed to fetch user info", 500)
    if name is None:
        return _error("User not found", 404)
    return {"name": name, "email": email}


@app.get("/userBMI")
async def user_bmi(email: str = ""):
    if not email:
        return _error("Email is required", 400)
    try:
        metrics = database.get_user_metrics(email)
    except Exception as e:
        logger.error("[userBMI] Error fetching metrics: %s", e)
        return _error("Failed to fetch user metrics", 500)
    if metrics is None:
        return _error("User not found", 404)
    height, weight = metrics
    return {"bmi": calculate_bmi(weight, height)}


@app.get("/userHealthScore")
async def user_health_score(email: str = ""):
    if not email:
        return _error("Email is required", 400)
    try:
        score = database.get_healthscore(email)
    except Exception as e:
        logger.error("[userHealthScore] Error fetching health score: %s", e)
        return _error("Failed to fetch health score", 500)
    if score is None:
        return _error("User not found", 404)
    return {"healthscore": score}


# Meal tracking
@app.get("/userTrack")
async def user_track(email: str = ""):
    if not email:
        return _error("Email is required", 400)
    try:
        track = database.fetch_track(email)
    except LookupError:
        return _error("User not found", 404)
    except Exception as e:
        logger.error("[userTrack] Error reading track: %s", e)
        return _error("Failed to fetch track", 500)
    return {"weight": weight_series(track), "calories": calorie_series(track)}


@app.post("/trackMeal")
async def track_meal(request: Request):
    try:
        form = await request.form()
    except Exception as e:
        logger.warning("[trackMeal] Error parsing form: %s", e)
        return _error(str(e), 400)

    uploads = []
    for field, value in form.multi_items():
        if isinstance(value, UploadFile) and value.filename:
            data = await value.read()
            if data:
                uploads.append((field, data))
    logger.info("[trackMeal] Received files: %s", [f for f, _ in uploads])

    email = form.get("email") or ""
    if not email:
        return _error("Email is required", 400)

    loop = asyncio.get_running_loop()
    images = await loop.run_in_executor(None, analyze_meal_uploads, uploads)

    texts = {meal: form.get(meal) for meal in ("breakfast", "lunch", "dinner")}
    texts = {k: v for k, v in texts.items() if isinstance(v, str)}
    try:
        meals = merge_meals(texts, images)
    except MissingMealError as e:
        logger.info("[trackMeal] %s", e)
        return _error(str(e), 400)

    entry = {"email": email, "date": form.get("date") or "", **meals, "weight": form.get("weight") or ""}
    try:
        database.append_meals(entry)
    except Exception as e:
        logger.error("[trackMeal] Couldn't track calories: %s", e)
        return _error("Couldn't track meals", 500)
    return {"status": "meal tracked"}


# Diet plans
@app.post("/genDietPlan")
async def gen_diet_plan(request: Request):
    try:
        user_data = await request.json()
    except ValueError as e:
        logger.warning("[genDietPlan] JSON decode error: %s", e)
        return _error("Invalid JSON body", 400)
    if not isinstance(user_data, dict):
        return _error("Invalid JSON body", 400)

    email = user_data.get("email")
    if not isinstance(email, str) or not email:
        return _error("email is missing or invalid", 400)

    loop = asyncio.get_running_loop()
    try:
        diet_plan = await loop.run_in_executor(None, generate_diet_plan, user_data)
    except AIServiceError as e:
        logger.error("[genDietPlan] Failed to generate diet plan: %s", e)
        return _error("couldn't generate diet plan", 500)
    logger.info("[genDietPlan] Diet plan generated for %s", email)

    try:
        updated = database.update_diet(email, diet_plan, 0)
    except Exception as e:
        logger.error("[genDietPlan] DB update error: %s", e)
        return _error("couldn't store diet plan in database", 500)
    if not updated:
        return _error("User not found", 404)
    return {"diet_plan": diet_plan}


@app.get("/dietTip")
async def diet_tip(email: str = ""):
    if not email:
        return _error("Email is required", 400)
    try:
        user = database.get_user_details(email)
    except Exception as e:
        logger.error("[dietTip] Database query error: %s", e)
        return _error("Database error", 500)
    if not user:
        return _error("User not found", 404)
    try:
        track = database.parse_track(user["track"])
    except ValueError:
        track = []
    loop = asyncio.get_running_loop()
    try:
        tip = await loop.run_in_executor(None, generate_diet_tip, user, track)
    except AIServiceError as e:
        logger.error("[dietTip] Failed to generate tip: %s", e)
        return _error("couldn't generate diet tip", 500)
    return {"tip": tip}


@app.post("/updateDiet")
async def update_diet(request: Request):
    form = await request.form()
    email = form.get("email") or ""
    if not email:
        return _error("Email is required", 400)
    try:
        hs = int(form.get("healthscore") or 0)
    except ValueError:
        logger.info("[updateDiet] Non-numeric healthscore %r ignored", form.get("healthscore"))
        hs = 0
    try:
        updated = database.update_diet(email, form.get("diet_plan") or "", hs)
    except Exception as e:
        logger.error("[updateDiet] Error updating diet: %s", e)
        return JSONResponse({"status": "couldn't get updated"}, status_code=500)
    if not updated:
        return _error("User not found", 404)
    return {"status": "plan updated"}


# Contact + admin
@app.post("/contactUs")
async def contact_us(request: Request):
    form = await request.form()
    message = (form.get("message") or "").strip()
    if not message:
        return _error("Message is required", 400)
    try:
        database.save_contact_message(form.get("name") or "", form.get("email") or "", message)
    except Exception as e:
        logger.error("[contactUs] Error saving message: %s", e)
        return _error("couldn't send message", 500)
    return {"status": "message sent"}


@app.get("/admin", response_class=HTMLResponse)
async def admin(request: Request):
    if not _is_admin(request):
        return _error("Forbidden", 403)
    try:
        users = database.read_all_users()
    except Exception as e:
        logger.error("[admin] Error reading users: %s", e)
        return _error("Database error", 500)
    for u in users:
        u["bmi"] = calculate_bmi(u["weight"], u["height"])
    return templates.TemplateResponse(request, "admin.html", {"request": request, "users": users})


@app.get("/dm")
async def direct_message(request: Request, email: str = "", message: str = ""):
    if not _is_admin(request):
        return _error("Forbidden", 403)
    if not email:
        return _error("Email is required", 400)
    try:
        updated = database.update_dm(email, message)
    except Exception as e:
        logger.error("[dm] Error updating dm: %s", e)
        return _error("couldn't send message", 500)
    if not updated:
        return _error("User not found", 404)
    return {"status": "message sent"}


# Health check
@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "Blissful Bites"}


if __name__ == "__main__":
    logger.info("Starting server on http://%s:%s", config.HOST, config.PORT)
    uvicorn.run(app, host=config.HOST, port=config.PORT)
