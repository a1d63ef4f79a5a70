# app.py - FastAPI server
import logging
from typing import List
from fastapi import FastAPI, Depends, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

import auth
import config
import loans
import schemas
import seed
import stats
from auth import CurrentUser, get_current_user, require_admin, require_verifier
from db import Database
from errors import register_error_handlers

# logging for debugging
logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("loan-manager")


# Dependency
def get_db(request: Request):
    db_sess = request.app.state.database.session()
    try:
        yield db_sess
    finally:
        db_sess.close()


def create_app(database=None, seed_demo_data=None):
    """Build the API around a store handle; the handle is opened on startup and closed on shutdown."""
    app = FastAPI(title="Loan Manager API")
    app.state.database = database or Database(config.DATABASE_URL)
    app.state.seed_demo_data = config.SEED_DEMO_DATA if seed_demo_data is None else seed_demo_data

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.on_event("startup")
    def startup_event():
        app.state.database.open()
        if app.state.seed_demo_data:
            seed.seed_demo_data(app.state.database)
        logger.info("[STARTUP] Loan manager API ready")

    @app.on_event("shutdown")
    def shutdown_event():
        app.state.database.close()
        logger.info("[SHUTDOWN] Loan manager API stopped")

    # ---------- auth ----------

    @app.post("/signup", response_model=schemas.UserOut, status_code=201)
    def signup(payload: schemas.SignupRequest, db_sess: Session = Depends(get_db)):
        user = auth.signup(db_sess, payload.full_name, payload.email, payload.password)
        return schemas.UserOut.from_user(user)

    @app.post("/login", response_model=schemas.LoginResponse)
    def login(payload: schemas.LoginRequest, db_sess: Session = Depends(get_db)):
        token, user = auth.login(db_sess, payload.email, payload.password)
        return schemas.LoginResponse(token=token, user=schemas.UserOut.from_user(user))

    # ---------- borrower ----------

    @app.get(
        "/loan-application-form",
        response_model=schemas.LoanApplicationForm,
        response_model_exclude_none=True,
    )
    def loan_application_form(user: CurrentUser = Depends(get_current_user)):
        return loans.LOAN_APPLICATION_FORM

    @app.post("/loans", response_model=schemas.LoanOut, status_code=201)
    def create_loan(
        payload: schemas.LoanCreateRequest,
        user: CurrentUser = Depends(get_current_user),
        db_sess: Session = Depends(get_db),
    ):
        loan = loans.create_loan(
            db_sess,
            user,
            full_name=payload.full_name,
            amount=payload.amount,
            tenure=payload.tenure,
            employment_status=payload.employment_status,
            reason=payload.reason,
            employment_address=payload.employment_address,
        )
        return schemas.LoanOut.from_loan(loan)

    @app.get("/user/loans", response_model=List[schemas.UserLoanOut])
    def user_loans(user: CurrentUser = Depends(get_current_user), db_sess: Session = Depends(get_db)):
        rows = loans.list_user_loans(db_sess, user.id)
        return [schemas.UserLoanOut.from_row(*row) for row in rows]

    # ---------- verifier / admin ----------

    @app.get("/loans", response_model=List[schemas.LoanReviewOut])
    def all_loans(user: CurrentUser = Depends(require_verifier), db_sess: Session = Depends(get_db)):
        return [schemas.LoanReviewOut.from_row(*row) for row in loans.list_loans(db_sess)]

    @app.get("/loans/recent", response_model=List[schemas.LoanReviewOut])
    def recent_loans(user: CurrentUser = Depends(require_verifier), db_sess: Session = Depends(get_db)):
        return [schemas.LoanReviewOut.from_row(*row) for row in loans.list_recent_loans(db_sess)]

    @app.get("/dashboard/admin", response_model=schemas.AdminDashboard)
    def admin_dashboard(user: CurrentUser = Depends(require_admin), db_sess: Session = Depends(get_db)):
        return schemas.AdminDashboard(**stats.admin_dashboard(db_sess))

    @app.get("/dashboard/verifier", response_model=schemas.VerifierDashboard)
    def verifier_dashboard(user: CurrentUser = Depends(require_verifier), db_sess: Session = Depends(get_db)):
        return schemas.VerifierDashboard(**stats.verifier_dashboard(db_sess))

    @app.put("/loans/{loan_id}/verify", response_model=schemas.MessageOut)
    def verify_loan(loan_id: int, user: CurrentUser = Depends(require_verifier), db_sess: Session = Depends(get_db)):
        loans.verify_loan(db_sess, loan_id, user)
        return {"message": "Loan verified successfully"}

    @app.put("/loans/{loan_id}/status", response_model=schemas.MessageOut)
    def update_loan_status(
        loan_id: int,
        payload: schemas.LoanStatusUpdateRequest,
        user: CurrentUser = Depends(require_admin),
        db_sess: Session = Depends(get_db),
    ):
        loans.update_loan_status(
            db_sess,
            loan_id,
            user,
            payload.status,
            disbursed_date=payload.disbursed_date,
            repayment_date=payload.repayment_date,
        )
        return {"message": "Loan status updated successfully"}

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info("Server running on port %s", config.PORT)
    uvicorn.run(app, host=config.HOST, port=config.PORT)
