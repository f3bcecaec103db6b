from sqlalchemy import Column, DateTime, Integer, String, Text, func

from database import Base


class LoanApplication(Base):
    __tablename__ = "loan_applications"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    # Step 1: personal info
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, index=True)
    income = Column(Integer, nullable=False)  # monthly net income, in `currency`
    identity_file_url = Column(Text, nullable=True)
    # Loan terms (seeded from the calculator)
    amount = Column(Integer, nullable=False)
    duration = Column(Integer, nullable=False)  # months
    currency = Column(String(3), nullable=False)
    # Step 2: disbursement
    iban = Column(String(34), nullable=True)
    payment_method_type = Column(String(32), nullable=False, default="bank_transfer")
    # Reserved for back-office review; never changed by the intake flow
    status = Column(String(32), nullable=False, default="pending", index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
