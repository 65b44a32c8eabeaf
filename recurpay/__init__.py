"""RecurPay CRM: financing plans, installment schedules and payment review"""
